"""
Tests for the booking transaction core, run against both storage adapters.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from conftest import available_tickets, count_rows
from tickettango.core.errors import (
    InsufficientTicketsError,
    NotFoundError,
    PastEventError,
    StorageError,
    ValidationError,
)
from tickettango.db.base import MAX_ROW_ID
from tickettango.services.booking_service import create_booking, get_user_booking, list_user_bookings


@pytest.mark.asyncio
async def test_booking_scenario(any_db, create_user, create_event):
    """Two tickets at 50.00 cost 100.00; a second request for two then fails."""
    user_id = await create_user(any_db)
    event_id = await create_event(
        any_db, price=Decimal("50.00"), available_tickets=3, total_tickets=10
    )

    booking = await create_booking(any_db, user_id, event_id, 2)

    assert booking.total_amount == Decimal("100.00")
    assert booking.quantity == 2
    assert booking.event_id == event_id
    assert booking.event_title == "Test Concert"
    assert booking.status == "confirmed"
    assert await available_tickets(any_db, event_id) == 1

    with pytest.raises(InsufficientTicketsError) as exc_info:
        await create_booking(any_db, user_id, event_id, 2)

    assert exc_info.value.available == 1
    assert exc_info.value.to_dict() == {"error": "Not enough tickets available", "available": 1}
    assert await available_tickets(any_db, event_id) == 1


@pytest.mark.asyncio
async def test_book_exactly_remaining_tickets(any_db, create_user, create_event):
    """Booking every remaining ticket succeeds; one more fails with 0 available."""
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=5, total_tickets=5)

    await create_booking(any_db, user_id, event_id, 5)
    assert await available_tickets(any_db, event_id) == 0

    with pytest.raises(InsufficientTicketsError) as exc_info:
        await create_booking(any_db, user_id, event_id, 1)
    assert exc_info.value.available == 0


@pytest.mark.asyncio
async def test_one_more_than_available_fails(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=4, total_tickets=10)

    with pytest.raises(InsufficientTicketsError) as exc_info:
        await create_booking(any_db, user_id, event_id, 5)

    assert exc_info.value.available == 4
    assert await available_tickets(any_db, event_id) == 4
    assert await count_rows(any_db, "bookings") == 0


@pytest.mark.asyncio
async def test_event_starting_now_is_past(any_db, create_user, create_event):
    """An event whose date equals the current instant can no longer be booked."""
    starts_at = datetime(2030, 6, 1, 18, 0, tzinfo=timezone.utc)
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, event_date=starts_at)

    with pytest.raises(PastEventError):
        await create_booking(any_db, user_id, event_id, 1, clock=lambda: starts_at)

    assert await available_tickets(any_db, event_id) == 100

    just_before = starts_at - timedelta(microseconds=1)
    booking = await create_booking(any_db, user_id, event_id, 1, clock=lambda: just_before)
    assert booking.booking_date == just_before


@pytest.mark.asyncio
async def test_past_event_rejected(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, event_date=datetime.now(timezone.utc) - timedelta(days=1))

    with pytest.raises(PastEventError) as exc_info:
        await create_booking(any_db, user_id, event_id, 1)

    assert exc_info.value.to_dict() == {"error": "Cannot book tickets for past events"}
    assert await count_rows(any_db, "bookings") == 0


@pytest.mark.asyncio
async def test_availability_checked_before_date(any_db, create_user, create_event):
    """A sold-out past event reports missing tickets, not the date."""
    user_id = await create_user(any_db)
    event_id = await create_event(
        any_db,
        event_date=datetime.now(timezone.utc) - timedelta(days=1),
        available_tickets=0,
    )

    with pytest.raises(InsufficientTicketsError):
        await create_booking(any_db, user_id, event_id, 1)


@pytest.mark.asyncio
async def test_unknown_event(any_db, create_user):
    user_id = await create_user(any_db)

    with pytest.raises(NotFoundError) as exc_info:
        await create_booking(any_db, user_id, 9999, 1)

    assert exc_info.value.message == "Event not found"
    assert await count_rows(any_db, "bookings") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "event_id, quantity",
    [
        (None, 1),
        (1, None),
        (1, 0),
        (1, -3),
        (1, True),
        (1, 1.5),
        (1, "2"),
        ("1", 1),
        (0, 1),
        (10**20, 1),
        (2**63, 1),
    ],
)
async def test_invalid_request_never_touches_storage(event_id, quantity):
    """Validation runs first, so no storage handle is needed to reject."""
    with pytest.raises(ValidationError) as exc_info:
        await create_booking(None, 1, event_id, quantity)

    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "Valid event ID and quantity are required"


@pytest.mark.asyncio
async def test_largest_event_id_reaches_storage(any_db, create_user):
    """The largest key binds on every backend; one past it is rejected."""
    user_id = await create_user(any_db)

    with pytest.raises(NotFoundError):
        await create_booking(any_db, user_id, MAX_ROW_ID, 1)
    with pytest.raises(ValidationError):
        await create_booking(any_db, user_id, MAX_ROW_ID + 1, 1)


@pytest.mark.asyncio
async def test_inventory_invariant(any_db, create_user, create_event):
    """available + sum(booked) == total after any mix of bookings."""
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=20, total_tickets=20)

    for quantity in (1, 2, 3, 4):
        await create_booking(any_db, user_id, event_id, quantity)
    with pytest.raises(InsufficientTicketsError):
        await create_booking(any_db, user_id, event_id, 11)

    booked = await any_db.query(
        "SELECT COALESCE(SUM(quantity), 0) AS booked FROM bookings WHERE event_id = :event_id",
        {"event_id": event_id},
    )
    assert await available_tickets(any_db, event_id) + int(booked.scalar()) == 20
    assert await available_tickets(any_db, event_id) == 10


@pytest.mark.asyncio
async def test_total_amount_uses_exact_decimal(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, price=Decimal("89.99"))

    booking = await create_booking(any_db, user_id, event_id, 3)

    assert booking.total_amount == Decimal("269.97")
    stored = await any_db.query(
        "SELECT total_amount FROM bookings WHERE id = :id", {"id": booking.id}
    )
    assert Decimal(str(stored.scalar())) == Decimal("269.97")


@pytest.mark.asyncio
async def test_rejected_attempt_leaves_no_trace(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=2, total_tickets=2)
    await create_booking(any_db, user_id, event_id, 1)

    async def snapshot():
        events = await any_db.query("SELECT * FROM events ORDER BY id")
        bookings = await any_db.query("SELECT * FROM bookings ORDER BY id")
        return events.rows, bookings.rows

    before = await snapshot()
    with pytest.raises(InsufficientTicketsError):
        await create_booking(any_db, user_id, event_id, 2)
    after = await snapshot()

    assert after == before
    assert len(after[1]) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("any_db", ["server"], indirect=True)
async def test_server_rolls_back_when_insert_fails(any_db, create_user, create_event, monkeypatch):
    """A failure after the decrement undoes the decrement on the server backend."""
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=5, total_tickets=5)

    original_execute = any_db.execute

    async def failing_execute(conn, sql, params=None):
        if sql.startswith("INSERT INTO bookings"):
            raise OperationalError(sql, params, Exception("disk I/O error"))
        return await original_execute(conn, sql, params)

    monkeypatch.setattr(any_db, "execute", failing_execute)

    with pytest.raises(StorageError) as exc_info:
        await create_booking(any_db, user_id, event_id, 2)

    # Opaque to the caller, engine error kept for the logs
    assert exc_info.value.to_dict() == {"error": "Internal server error"}
    assert isinstance(exc_info.value.__cause__, OperationalError)

    monkeypatch.undo()
    assert await available_tickets(any_db, event_id) == 5
    assert await count_rows(any_db, "bookings") == 0


@pytest.mark.asyncio
@pytest.mark.parametrize("any_db", ["embedded"], indirect=True)
async def test_concurrent_bookings_never_oversell(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_id = await create_event(any_db, available_tickets=5, total_tickets=5)

    results = await asyncio.gather(
        *(create_booking(any_db, user_id, event_id, 1) for _ in range(10)),
        return_exceptions=True,
    )

    succeeded = [r for r in results if not isinstance(r, Exception)]
    rejected = [r for r in results if isinstance(r, InsufficientTicketsError)]
    assert len(succeeded) == 5
    assert len(rejected) == 5
    assert await available_tickets(any_db, event_id) == 0
    assert await count_rows(any_db, "bookings") == 5


@pytest.mark.asyncio
async def test_user_bookings_newest_first(any_db, create_user, create_event):
    user_id = await create_user(any_db)
    event_date = datetime(2030, 1, 1, tzinfo=timezone.utc)
    first_event = await create_event(any_db, title="First", event_date=event_date)
    second_event = await create_event(any_db, title="Second", event_date=event_date)

    first = await create_booking(
        any_db, user_id, first_event, 1, clock=lambda: datetime(2029, 1, 1, tzinfo=timezone.utc)
    )
    second = await create_booking(
        any_db, user_id, second_event, 2, clock=lambda: datetime(2029, 1, 2, tzinfo=timezone.utc)
    )

    bookings = await list_user_bookings(any_db, user_id)

    assert [b.id for b in bookings] == [second.id, first.id]
    assert bookings[0].event_title == "Second"
    assert bookings[0].total_amount == Decimal("100.00")
    assert bookings[0].venue == "Test Venue"


@pytest.mark.asyncio
async def test_other_users_booking_not_found(any_db, create_user, create_event):
    owner_id = await create_user(any_db, username="owner")
    other_id = await create_user(any_db, username="other")
    event_id = await create_event(any_db)
    booking = await create_booking(any_db, owner_id, event_id, 1)

    detail = await get_user_booking(any_db, owner_id, booking.id)
    assert detail.unit_price == Decimal("50.00")
    assert detail.event_description == "A test event"

    with pytest.raises(NotFoundError):
        await get_user_booking(any_db, other_id, booking.id)
