"""
Booking table: one row per reservation.

Key design decisions:
- `total_amount` is captured at booking time, never recomputed from the
  current event price
- Status field anticipates cancellation/refund; rows are never deleted
- No uniqueness on (user_id, event_id): a user may book the same event again
"""

from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, CheckConstraint, func

from tickettango.db.base import Base

BOOKING_STATUSES = ("confirmed", "cancelled", "refunded")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Integer, ForeignKey("events.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    booking_date = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    status = Column(String(20), nullable=False, server_default="confirmed")

    __table_args__ = (
        CheckConstraint("quantity >= 1", name="check_booking_quantity_positive"),
        CheckConstraint(
            "status IN ('confirmed', 'cancelled', 'refunded')", name="check_booking_status"
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, user={self.user_id}, event={self.event_id}, status={self.status})>"
