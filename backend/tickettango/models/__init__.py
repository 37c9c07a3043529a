from tickettango.models.user import User
from tickettango.models.event import Event, EVENT_CATEGORIES
from tickettango.models.booking import Booking, BOOKING_STATUSES

__all__ = ["User", "Event", "Booking", "EVENT_CATEGORIES", "BOOKING_STATUSES"]
