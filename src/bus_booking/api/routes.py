"""API routes for the Bus Booking service."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from bus_booking.api.dependencies import get_booking_service
from bus_booking.domain.errors import (
    BookingError,
    MalformedResponse,
    OrderValidationError,
    ReservationExpired,
    VendorError,
    VendorUnavailable,
)
from bus_booking.domain.models import (
    BaggageList,
    BaggageRequest,
    BusPlan,
    BuyRequest,
    CancelRequest,
    CancelResult,
    DiscountList,
    DiscountRequest,
    FreeSeatsRequest,
    FreeSeatsResult,
    NewOrderRequest,
    OrderResult,
    PlanRequest,
    PointCity,
    PointsRequest,
    ReserveValidation,
    ReserveValidationRequest,
    RouteOption,
    RouteSchedule,
    RoutesRequest,
)
from bus_booking.domain.services.booking import BookingService

logger = logging.getLogger(__name__)

router = APIRouter()


def _to_http_error(error: BookingError) -> HTTPException:
    """Translate a core exception into the HTTP error returned to the client."""
    if isinstance(error, OrderValidationError):
        return HTTPException(status_code=422, detail=error.to_dict())
    if isinstance(error, ReservationExpired):
        return HTTPException(
            status_code=409,
            detail={
                "code": error.code,
                "order_id": error.order_id,
                "reservation_until": error.reservation_until,
            },
        )
    if isinstance(error, VendorError):
        return HTTPException(
            status_code=409,
            detail={"code": error.code, "vendor_code": error.vendor_code, "detail": error.detail},
        )
    if isinstance(error, MalformedResponse | VendorUnavailable):
        return HTTPException(status_code=502, detail={"code": error.code, "message": str(error)})
    logger.error("unhandled booking error", extra={"error": str(error)})
    return HTTPException(status_code=500, detail={"code": error.code, "message": str(error)})


@router.post("/routes", response_model=list[RouteOption], tags=["search"])
async def search_routes(
    request: RoutesRequest,
    service: BookingService = Depends(get_booking_service),
) -> list[RouteOption]:
    """Search bookable legs between two points on a date."""
    logger.info("routes called", extra={"event": "call", "id_from": request.id_from})
    try:
        return await service.search_routes(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/free_seats", response_model=FreeSeatsResult, tags=["search"])
async def get_free_seats(
    request: FreeSeatsRequest,
    service: BookingService = Depends(get_booking_service),
) -> FreeSeatsResult | None:
    try:
        return await service.get_free_seats(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/discounts", response_model=DiscountList, tags=["search"])
async def get_discounts(
    request: DiscountRequest,
    service: BookingService = Depends(get_booking_service),
) -> DiscountList:
    try:
        return await service.get_discounts(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/baggage", response_model=BaggageList, tags=["search"])
async def get_baggage(
    request: BaggageRequest,
    service: BookingService = Depends(get_booking_service),
) -> BaggageList:
    try:
        return await service.get_baggage(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.get("/schedule/{timetable_id}", response_model=RouteSchedule, tags=["search"])
async def get_schedule(
    timetable_id: str,
    lang: str | None = Query(default=None, description="Response language"),
    service: BookingService = Depends(get_booking_service),
) -> RouteSchedule:
    try:
        return await service.get_schedule(timetable_id, lang=lang)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/new_order", response_model=OrderResult, tags=["orders"])
async def new_order(
    request: NewOrderRequest,
    service: BookingService = Depends(get_booking_service),
) -> OrderResult:
    """
    Build, validate and submit a reservation.

    Invalid input is rejected with 422 before anything is sent to the vendor.
    """
    logger.info(
        "new_order called",
        extra={"event": "call", "legs": len(request.trips), "passengers": len(request.passengers)},
    )
    try:
        return await service.create_order(
            passengers=request.passengers,
            trips=request.trips,
            phone=request.phone,
            email=request.email,
            promocode=request.promocode,
            currency=request.currency,
            lang=request.lang,
        )
    except BookingError as e:
        raise _to_http_error(e) from None


@router.get("/order/{order_id}", response_model=OrderResult, tags=["orders"])
async def get_order(
    order_id: int,
    security: str | None = Query(default=None, description="Order security code"),
    lang: str | None = Query(default=None, description="Response language"),
    service: BookingService = Depends(get_booking_service),
) -> OrderResult:
    try:
        return await service.get_order(order_id, security=security, lang=lang)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/points", response_model=list[PointCity], tags=["search"])
async def search_points(
    request: PointsRequest,
    service: BookingService = Depends(get_booking_service),
) -> list[PointCity]:
    """Search cities by name prefix, country or connection."""
    try:
        return await service.search_points(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/plan", response_model=BusPlan, tags=["search"])
async def get_plan(
    request: PlanRequest,
    service: BookingService = Depends(get_booking_service),
) -> BusPlan:
    try:
        return await service.get_plan(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/reserve_validation", response_model=ReserveValidation, tags=["orders"])
async def reserve_validation(
    request: ReserveValidationRequest,
    service: BookingService = Depends(get_booking_service),
) -> ReserveValidation:
    try:
        return await service.validate_reservation(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/buy", response_model=OrderResult, tags=["orders"])
async def buy(
    request: BuyRequest,
    service: BookingService = Depends(get_booking_service),
) -> OrderResult:
    """
    Pay for a reserved order.

    An elapsed `reservation_until` is rejected with 409 before anything is
    sent to the vendor.
    """
    logger.info("buy called", extra={"event": "call", "order_id": request.order_id})
    try:
        return await service.buy(request)
    except BookingError as e:
        raise _to_http_error(e) from None


@router.post("/cancel", response_model=CancelResult, tags=["orders"])
async def cancel(
    request: CancelRequest,
    service: BookingService = Depends(get_booking_service),
) -> CancelResult:
    logger.info(
        "cancel called",
        extra={"event": "call", "order_id": request.order_id, "ticket_id": request.ticket_id},
    )
    try:
        return await service.cancel(request)
    except BookingError as e:
        raise _to_http_error(e) from None
