"""
Pydantic schemas for booking requests and responses.
"""

from datetime import datetime
from typing import Any, Optional

from tickettango.schemas.common import CamelModel, Money


class BookingCreate(CamelModel):
    # Taken as sent: type and range checks live in the booking core, so JSON
    # true, 1.5 or "abc" get the same 400 as a zero quantity
    event_id: Any = None
    quantity: Any = None


class BookingConfirmation(CamelModel):
    id: int
    event_id: int
    event_title: str
    quantity: int
    total_amount: Money
    booking_date: datetime
    status: str


class BookingCreatedResponse(CamelModel):
    message: str
    booking: BookingConfirmation


class UserBooking(CamelModel):
    id: int
    event_id: int
    quantity: int
    total_amount: Money
    booking_date: datetime
    status: str
    event_title: str
    venue: str
    event_date: datetime
    category: str
    image_url: Optional[str]


class UserBookingDetail(UserBooking):
    event_description: Optional[str]
    unit_price: Money
