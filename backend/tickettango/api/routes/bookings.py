"""
Booking endpoints. The booking core raises domain errors; the app-level
handler in main.py turns them into JSON responses:

  event not found      -> 404
  not enough tickets   -> 400 with `available`
  past event           -> 400
  invalid request      -> 400
  anything else        -> 500, opaque
"""

from fastapi import APIRouter, Depends, Path, status

from tickettango.core.security import get_current_user_id
from tickettango.db.base import MAX_ROW_ID
from tickettango.db.session import get_db
from tickettango.infrastructure.query import QueryService
from tickettango.schemas.booking import BookingCreate, BookingCreatedResponse, UserBooking, UserBookingDetail
from tickettango.services.booking_service import create_booking, get_user_booking, list_user_bookings

router = APIRouter(prefix="/bookings", tags=["Bookings"])


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_booking_endpoint(
    booking_data: BookingCreate,
    user_id: int = Depends(get_current_user_id),
    db: QueryService = Depends(get_db),
):
    """Reserve tickets for an event."""
    booking = await create_booking(db, user_id, booking_data.event_id, booking_data.quantity)
    return BookingCreatedResponse(message="Booking created successfully", booking=booking)


@router.get("/my-bookings", response_model=list[UserBooking])
async def list_user_bookings_endpoint(
    user_id: int = Depends(get_current_user_id),
    db: QueryService = Depends(get_db),
):
    """All bookings of the authenticated user, newest first."""
    return await list_user_bookings(db, user_id)


@router.get("/{booking_id}", response_model=UserBookingDetail)
async def get_booking_endpoint(
    booking_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    user_id: int = Depends(get_current_user_id),
    db: QueryService = Depends(get_db),
):
    return await get_user_booking(db, user_id, booking_id)
