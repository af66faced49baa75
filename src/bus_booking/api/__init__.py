from bus_booking.api.routes import router

__all__ = ["router"]
