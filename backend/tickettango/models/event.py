"""
Event table with ticket inventory tracking.

Key design decisions:
- `available_tickets` is denormalized (avoids a SUM over bookings) and is only
  ever written by the booking core
- CHECK constraints keep 0 <= available_tickets <= total_tickets even if a
  booking bug slips through
- Index on `event_date` for the upcoming/featured listings
"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Numeric, Index, CheckConstraint

from tickettango.db.base import Base, CreatedAtMixin

EVENT_CATEGORIES = ("performance", "workshop")


class Event(Base, CreatedAtMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)
    venue = Column(String(200), nullable=False)
    event_date = Column(DateTime(timezone=True), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    available_tickets = Column(Integer, nullable=False)
    total_tickets = Column(Integer, nullable=False)
    image_url = Column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("available_tickets >= 0", name="check_available_tickets_non_negative"),
        CheckConstraint("available_tickets <= total_tickets", name="check_available_lte_total"),
        CheckConstraint(
            "category IN ('performance', 'workshop')", name="check_event_category"
        ),
        Index("ix_events_event_date", "event_date"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, available={self.available_tickets}/{self.total_tickets})>"
