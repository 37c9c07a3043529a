"""
Event endpoints: listing with search and pagination, featured, detail.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from tickettango.db.base import MAX_ROW_ID
from tickettango.db.session import get_db
from tickettango.infrastructure.query import QueryService
from tickettango.schemas.event import EventListResponse, EventResponse, Pagination
from tickettango.services.event_service import featured_events, get_event, list_events

router = APIRouter(prefix="/events", tags=["Events"])


@router.get("", response_model=EventListResponse)
async def list_events_endpoint(
    search: Optional[str] = Query(None, max_length=100),
    category: Optional[str] = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: QueryService = Depends(get_db),
):
    """List events ordered by date. `category` is one of performance, workshop."""
    events, total = await list_events(db, search, category, limit, offset)
    return EventListResponse(
        events=events,
        pagination=Pagination(total=total, limit=limit, offset=offset, has_more=offset + limit < total),
    )


@router.get("/featured/upcoming", response_model=list[EventResponse])
async def featured_events_endpoint(db: QueryService = Depends(get_db)):
    """Up to six upcoming events that still have tickets."""
    return await featured_events(db)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event_endpoint(
    event_id: int = Path(..., ge=1, le=MAX_ROW_ID),
    db: QueryService = Depends(get_db),
):
    """Get a single event with its live ticket count."""
    return await get_event(db, event_id)
