"""
Event service: listing, search and lookup. Events are read-only here; only
the booking core changes availability.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from tickettango.core.errors import NotFoundError
from tickettango.infrastructure.query import QueryService, coerce_money, coerce_timestamp
from tickettango.models import EVENT_CATEGORIES
from tickettango.schemas.event import EventResponse

FEATURED_LIMIT = 6

EVENT_COLUMNS = (
    "id, title, description, category, venue, event_date, price, "
    "available_tickets, total_tickets, image_url, created_at"
)


def to_event(row: dict[str, Any]) -> EventResponse:
    return EventResponse(
        **{
            **row,
            "event_date": coerce_timestamp(row["event_date"]),
            "price": coerce_money(row["price"]),
            "created_at": coerce_timestamp(row["created_at"]) if row.get("created_at") else None,
        }
    )


def _filters(db: QueryService, search: Optional[str], category: Optional[str]) -> tuple[str, dict[str, Any]]:
    clause = ""
    params: dict[str, Any] = {}
    if search:
        op = db.fragment("contains")
        clause += f" AND (title {op} :search OR description {op} :search OR venue {op} :search)"
        params["search"] = f"%{search}%"
    # Unknown categories are ignored rather than rejected
    if category in EVENT_CATEGORIES:
        clause += " AND category = :category"
        params["category"] = category
    return clause, params


async def list_events(
    db: QueryService,
    search: Optional[str] = None,
    category: Optional[str] = None,
    limit: int = 20,
    offset: int = 0,
) -> tuple[list[EventResponse], int]:
    """List events ordered by date, with optional text search and category filter."""
    clause, params = _filters(db, search, category)

    result = await db.query(
        f"SELECT {EVENT_COLUMNS} FROM events WHERE 1=1{clause}"
        " ORDER BY event_date ASC, id ASC" + db.fragment("paginate"),
        {**params, "limit": limit, "offset": offset},
    )
    count = await db.query(f"SELECT COUNT(*) AS total FROM events WHERE 1=1{clause}", params)

    return [to_event(row) for row in result.rows], int(count.scalar() or 0)


async def get_event(db: QueryService, event_id: int) -> EventResponse:
    result = await db.query(
        f"SELECT {EVENT_COLUMNS} FROM events WHERE id = :id",
        {"id": event_id},
    )
    row = result.first()
    if row is None:
        raise NotFoundError("Event not found")
    return to_event(row)


async def featured_events(db: QueryService, now: Optional[datetime] = None) -> list[EventResponse]:
    """Soonest upcoming events that still have tickets."""
    result = await db.query(
        f"SELECT {EVENT_COLUMNS} FROM events "
        "WHERE event_date > :now AND available_tickets > 0 "
        "ORDER BY event_date ASC" + db.fragment("top_n"),
        {"now": now or datetime.now(timezone.utc), "limit": FEATURED_LIMIT},
    )
    return [to_event(row) for row in result.rows]
