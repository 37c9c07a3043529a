"""
Pydantic schemas for event listings.
"""

from datetime import datetime
from typing import Optional

from tickettango.schemas.common import CamelModel, Money


class EventResponse(CamelModel):
    id: int
    title: str
    description: Optional[str]
    category: str
    venue: str
    event_date: datetime
    price: Money
    available_tickets: int
    total_tickets: int
    image_url: Optional[str]
    created_at: Optional[datetime] = None


class Pagination(CamelModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class EventListResponse(CamelModel):
    events: list[EventResponse]
    pagination: Pagination
