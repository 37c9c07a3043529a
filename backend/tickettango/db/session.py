"""
Storage lifecycle: built once at startup, disposed at shutdown, injected into
request handlers through ``get_db``.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from tickettango.core.config import Settings, get_settings
from tickettango.core.logging import get_logger
from tickettango.infrastructure.adapters import StorageAdapter
from tickettango.infrastructure.query import QueryService
from tickettango.infrastructure.selector import create_adapter, get_backend_kind

logger = get_logger(__name__)


@dataclass(frozen=True)
class Storage:
    adapter: StorageAdapter
    queries: QueryService

    @property
    def backend(self) -> str:
        return self.adapter.kind


async def open_storage(
    settings: Optional[Settings] = None,
    adapter: Optional[StorageAdapter] = None,
) -> Storage:
    """
    Build the adapter, create the schema and seed an empty store.

    Any failure here propagates: the process must not serve traffic
    without a working store.
    """
    settings = settings or get_settings()
    adapter = adapter or create_adapter(get_backend_kind(), settings)
    try:
        await adapter.create_schema()
        if settings.SEED_ON_STARTUP:
            await adapter.seed_if_empty()
    except Exception as e:
        logger.error("storage_unavailable", backend=adapter.kind, error=str(e))
        await adapter.dispose()
        raise

    logger.info("storage_ready", backend=adapter.kind, dialect=adapter.dialect)
    return Storage(adapter=adapter, queries=QueryService(adapter))


async def close_storage(storage: Storage) -> None:
    await storage.adapter.dispose()


def get_db(request: Request) -> QueryService:
    return request.app.state.storage.queries
