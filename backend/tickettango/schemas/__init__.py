from tickettango.schemas.user import UserCreate, UserLogin, UserSummary, AuthResponse, TokenVerification
from tickettango.schemas.event import EventResponse, EventListResponse, Pagination
from tickettango.schemas.booking import (
    BookingCreate,
    BookingConfirmation,
    BookingCreatedResponse,
    UserBooking,
    UserBookingDetail,
)

__all__ = [
    "UserCreate", "UserLogin", "UserSummary", "AuthResponse", "TokenVerification",
    "EventResponse", "EventListResponse", "Pagination",
    "BookingCreate", "BookingConfirmation", "BookingCreatedResponse",
    "UserBooking", "UserBookingDetail",
]
