"""
Booking service: the check-then-reserve transaction.

STEPS
=====

  1. Validate quantity and event id (no storage access)
  2. Fetch the event's price, availability and date
  3. Reject if fewer tickets are left than requested
  4. Reject if the event is not strictly in the future
  5. total_amount = price * quantity, computed once from the row read in 2
  6. Decrement availability (guarded: available_tickets >= quantity), then
     insert the booking row
  7. Read the booking back joined with the event title

CONCURRENCY BY BACKEND
======================

  Server (PostgreSQL):
    Steps 2-6 run in one transaction. The event row is read FOR UPDATE, so
    concurrent reservations for the same event queue behind each other, and
    any failure rolls the whole attempt back.

  Embedded (SQLite):
    No multi-statement transaction. Steps 2-6 run as autocommitted statements
    under the adapter's single-writer lock, which closes the read-then-write
    race between requests of this process. A failure after the decrement is
    not undone; that is the accepted limit of this backend.

  The guarded decrement is the last line of defence on both: a stale read can
  never push availability below zero, and the CHECK constraint backs it up.

No retries are performed. Callers get the same results and errors whichever
backend is active.
"""

import time
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from tickettango.core.errors import (
    InsufficientTicketsError,
    NotFoundError,
    PastEventError,
    StorageError,
    TicketTangoError,
    ValidationError,
)
from tickettango.core.logging import get_logger
from tickettango.core.metrics import booking_latency, record_booking_attempt, record_storage_error
from tickettango.db.base import MAX_ROW_ID
from tickettango.infrastructure.query import QueryService, coerce_money, coerce_timestamp
from tickettango.schemas.booking import BookingConfirmation, UserBooking, UserBookingDetail

logger = get_logger(__name__)

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_booking_request(event_id: Any, quantity: Any) -> None:
    if not _is_int(event_id) or not 1 <= event_id <= MAX_ROW_ID:
        raise ValidationError("Valid event ID and quantity are required")
    if not _is_int(quantity) or quantity <= 0:
        raise ValidationError("Valid event ID and quantity are required")


async def create_booking(
    db: QueryService,
    user_id: int,
    event_id: Any,
    quantity: Any,
    clock: Clock = utcnow,
) -> BookingConfirmation:
    """
    Reserve `quantity` tickets of `event_id` for `user_id`.

    Raises:
        ValidationError: bad event id or quantity
        NotFoundError: event does not exist
        InsufficientTicketsError: fewer tickets left than requested (carries `available`)
        PastEventError: event date is not in the future
        StorageError: the engine failed; details are logged, never returned
    """
    validate_booking_request(event_id, quantity)

    backend = db.backend
    started = time.perf_counter()
    try:
        async with db.unit_of_work() as conn:
            result = await db.execute(
                conn,
                "SELECT id, title, price, available_tickets, event_date "
                "FROM events WHERE id = :event_id" + db.fragment("lock_for_update"),
                {"event_id": event_id},
            )
            event = result.first()
            if event is None:
                raise NotFoundError("Event not found")

            available = int(event["available_tickets"])
            if available < quantity:
                raise InsufficientTicketsError(available=available)

            now = clock()
            if coerce_timestamp(event["event_date"]) <= now:
                raise PastEventError()

            unit_price = coerce_money(event["price"])
            total_amount = coerce_money(unit_price * quantity)

            decrement = await db.execute(
                conn,
                "UPDATE events SET available_tickets = available_tickets - :quantity "
                "WHERE id = :event_id AND available_tickets >= :quantity",
                {"event_id": event_id, "quantity": quantity},
            )
            if decrement.rowcount != 1:
                # Availability moved between the read and the write
                current = await db.execute(
                    conn,
                    "SELECT available_tickets FROM events WHERE id = :event_id",
                    {"event_id": event_id},
                )
                raise InsufficientTicketsError(available=int(current.scalar() or 0))

            booking_id = await db.insert_returning_id(
                conn,
                "INSERT INTO bookings (user_id, event_id, quantity, total_amount, booking_date, status) "
                "VALUES (:user_id, :event_id, :quantity, :total_amount, :booking_date, 'confirmed')",
                {
                    "user_id": user_id,
                    "event_id": event_id,
                    "quantity": quantity,
                    "total_amount": total_amount,
                    "booking_date": now,
                },
            )

            created = await db.execute(
                conn,
                "SELECT b.id, b.event_id, e.title AS event_title, b.quantity, "
                "b.total_amount, b.booking_date, b.status "
                "FROM bookings b INNER JOIN events e ON b.event_id = e.id "
                "WHERE b.id = :booking_id",
                {"booking_id": booking_id},
            )
            row = created.first()

    except TicketTangoError as e:
        record_booking_attempt("rejected", backend)
        logger.warning(
            "booking_rejected",
            reason=type(e).__name__,
            user_id=user_id,
            event_id=event_id,
            requested=quantity,
            **e.details,
        )
        raise
    except SQLAlchemyError as e:
        record_booking_attempt("error", backend)
        record_storage_error(backend, "create_booking")
        logger.error(
            "storage_error",
            operation="create_booking",
            backend=backend,
            event_id=event_id,
            error=str(e),
        )
        raise StorageError() from e
    finally:
        booking_latency.labels(backend=backend).observe(time.perf_counter() - started)

    booking = BookingConfirmation(
        id=row["id"],
        event_id=row["event_id"],
        event_title=row["event_title"],
        quantity=row["quantity"],
        # The amount charged, not a recomputation from the stored column
        total_amount=total_amount,
        booking_date=coerce_timestamp(row["booking_date"]),
        status=row["status"],
    )
    record_booking_attempt("success", backend)
    logger.info(
        "booking_created",
        booking_id=booking.id,
        user_id=user_id,
        event_id=event_id,
        quantity=quantity,
        total_amount=str(total_amount),
        backend=backend,
    )
    return booking


_USER_BOOKING_COLUMNS = (
    "b.id, b.event_id, b.quantity, b.total_amount, b.booking_date, b.status, "
    "e.title AS event_title, e.venue, e.event_date, e.category, e.image_url"
)


def _user_booking_fields(row: dict[str, Any]) -> dict[str, Any]:
    return {
        **row,
        "total_amount": coerce_money(row["total_amount"]),
        "booking_date": coerce_timestamp(row["booking_date"]),
        "event_date": coerce_timestamp(row["event_date"]),
    }


async def list_user_bookings(db: QueryService, user_id: int) -> list[UserBooking]:
    """Get all bookings for a user, newest first."""
    result = await db.query(
        f"SELECT {_USER_BOOKING_COLUMNS} "
        "FROM bookings b INNER JOIN events e ON b.event_id = e.id "
        "WHERE b.user_id = :user_id "
        "ORDER BY b.booking_date DESC, b.id DESC",
        {"user_id": user_id},
    )
    return [UserBooking(**_user_booking_fields(row)) for row in result.rows]


async def get_user_booking(db: QueryService, user_id: int, booking_id: int) -> UserBookingDetail:
    """Get one booking. Another user's booking is reported as not found."""
    result = await db.query(
        f"SELECT {_USER_BOOKING_COLUMNS}, e.description AS event_description, e.price AS unit_price "
        "FROM bookings b INNER JOIN events e ON b.event_id = e.id "
        "WHERE b.id = :booking_id AND b.user_id = :user_id",
        {"booking_id": booking_id, "user_id": user_id},
    )
    row: Optional[dict[str, Any]] = result.first()
    if row is None:
        raise NotFoundError("Booking not found")
    fields = _user_booking_fields(row)
    fields["unit_price"] = coerce_money(row["unit_price"])
    return UserBookingDetail(**fields)
