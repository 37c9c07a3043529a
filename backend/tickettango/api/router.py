"""
Central API router that aggregates all route modules.
"""

from fastapi import APIRouter

from tickettango.api.routes import auth, bookings, events

api_router = APIRouter(prefix="/api")
api_router.include_router(auth.router)
api_router.include_router(events.router)
api_router.include_router(bookings.router)
