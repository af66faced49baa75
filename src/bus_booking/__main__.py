"""Entrypoint of the ``bus-booking`` console script (``python -m bus_booking``)."""

import uvicorn

from bus_booking.config import get_settings


def main() -> None:
    """Serve the booking API with uvicorn, configured from settings."""
    settings = get_settings()
    uvicorn.run(
        "bus_booking.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
        # our dictConfig from create_app() owns the handlers
        log_config=None,
    )


if __name__ == "__main__":
    main()
