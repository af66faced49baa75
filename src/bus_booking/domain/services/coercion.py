"""Coercion helpers isolating the vendor's XML-derived JSON quirks.

The vendor serializes XML into JSON, so a collection may arrive as a list,
as an object keyed by string indices (``{"0": {...}, "1": {...}}``), as an
``{"item": ...}`` wrapper or as a single bare object. Numbers frequently
arrive as strings. Everything here turns those shapes into plain Python
values so the normalizers never branch on shape.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any, TypeVar

from ..errors import MalformedResponse, VendorError

E = TypeVar("E", bound=Enum)

RawMapping = Mapping[str, Any]

_TRUE_STRINGS = frozenset({"1", "true", "yes", "da", "on"})
_SEAT_PARTS = re.compile(r"[0-9]+|[^0-9]+")
_XML_ERROR = re.compile(r"<error>\s*([^<]*?)\s*</error>", re.IGNORECASE)
_XML_DETAIL = re.compile(r"<detal>\s*([^<]*?)\s*</detal>", re.IGNORECASE)


def ensure_list(value: Any) -> list[Any]:
    """Return a collection as an ordered list regardless of its wire shape."""
    if value is None or value == "":
        return []
    if isinstance(value, list | tuple):
        return [item for item in value if item is not None]
    if isinstance(value, Mapping):
        if "item" in value:
            return ensure_list(value["item"])
        if value and all(_is_index(key) for key in value):
            return [value[key] for key in sorted(value, key=int) if value[key] is not None]
        return [value]
    return [value]


def first_present(data: RawMapping, *keys: str) -> Any:
    """Return the first value that is present and not empty."""
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


def to_float(value: Any, default: float = 0.0) -> float:
    if value is None or value == "":
        return default
    if isinstance(value, bool):
        return float(value)
    if isinstance(value, int | float):
        number = float(value)
    else:
        try:
            number = float(str(value).strip().replace(",", "."))
        except ValueError:
            return default
    if math.isnan(number) or math.isinf(number):
        return default
    return number


def to_int(value: Any, default: int = 0) -> int:
    return int(to_float(value, float(default)))


def to_optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return to_float(value)


def to_optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return to_int(value)


def to_optional_str(value: Any) -> str | None:
    text = to_str(value)
    return text or None


def to_flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int | float):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return False


def to_csv_list(value: Any) -> list[str]:
    """Split ``"wifi, wc,,220v"`` style strings; lists pass through."""
    if isinstance(value, list | tuple):
        return [to_str(item) for item in value if to_str(item)]
    return [part.strip() for part in re.split(r"[,|;]", to_str(value)) if part.strip()]


def coerce_enum(enum_cls: type[E], value: Any, default: E) -> E:
    """Map a raw value onto an enum; unrecognized values become ``UNKNOWN``."""
    text = to_str(value).lower()
    if not text:
        return default
    try:
        return enum_cls(text)
    except ValueError:
        return enum_cls["UNKNOWN"]


def normalize_seat_number(raw: Any) -> str:
    """
    Return the canonical form of a seat label.

    Whitespace is removed, letters are uppercased and leading zeros are
    stripped from every numeric run while the letter/digit order is kept,
    so ``" 05a"``, ``"5A"`` and ``5`` + ``"a"`` all denote seat ``5A``.
    """
    text = "".join(to_str(raw).split()).upper()
    parts = []
    for part in _SEAT_PARTS.findall(text):
        if part.isdigit():
            part = part.lstrip("0") or "0"
        parts.append(part)
    return "".join(parts)


def unwrap_root(raw: Any) -> RawMapping:
    """Return the payload body, unwrapping the XML ``root`` element if present."""
    if not isinstance(raw, Mapping):
        raise MalformedResponse(
            f"Expected a JSON object, got {type(raw).__name__}",
            raw=raw,
        )
    root = raw.get("root")
    if isinstance(root, Mapping):
        return root
    return raw


def raise_for_vendor_error(raw: Any) -> RawMapping:
    """
    Raise VendorError when the payload carries a vendor error token.

    Returns:
        The unwrapped payload body when no error is present
    """
    data = unwrap_root(raw)
    error = first_present(data, "error", "error_code")
    if error is not None and to_str(error) not in ("", "0"):
        detail = first_present(data, "detal", "detail", "error_message")
        raise VendorError(to_str(error), to_str(detail))
    return data


def extract_xml_error(text: str) -> VendorError | None:
    """Find an ``<error>code</error>`` element in a non-JSON response body."""
    match = _XML_ERROR.search(text)
    if match is None or not match.group(1):
        return None
    detail = _XML_DETAIL.search(text)
    return VendorError(match.group(1), detail.group(1) if detail else "")


def _is_index(key: Any) -> bool:
    if isinstance(key, int) and not isinstance(key, bool):
        return True
    return isinstance(key, str) and key.isdigit()
