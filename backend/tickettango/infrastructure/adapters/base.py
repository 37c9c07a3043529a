"""
Storage adapter interface.
Allows swapping storage engines without changing business logic.

Implementations:
- EmbeddedAdapter: single SQLite file, statement-level atomicity only
- ServerAdapter: pooled PostgreSQL, explicit multi-statement transactions

Both build the schema from the shared SQLAlchemy metadata and seed the same
sample rows, so the only per-engine concerns left to subclasses are engine
construction, parameter style and how a multi-statement unit is protected.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, AsyncContextManager, Mapping, Optional, Sequence, Union

from sqlalchemy import func, insert, select, text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine

from tickettango.core.logging import get_logger
from tickettango.db.base import Base
from tickettango.infrastructure.seed import sample_events, sample_users
from tickettango.models import Event, User

logger = get_logger(__name__)

DriverParams = Union[Sequence[Any], Mapping[str, Any]]

# Transaction-scoped advisory lock key serializing seeding across workers
SEED_LOCK_KEY = 0x7E5EED


@dataclass
class ResultSet:
    rows: list[dict[str, Any]] = field(default_factory=list)
    rowcount: int = -1
    lastrowid: Optional[int] = None

    def first(self) -> Optional[dict[str, Any]]:
        return self.rows[0] if self.rows else None

    def scalar(self) -> Any:
        row = self.first()
        return next(iter(row.values())) if row else None


class Connection(ABC):
    """A checked-out handle on the store. Always release() it."""

    def __init__(self, conn: AsyncConnection):
        self._conn = conn

    @abstractmethod
    async def execute(self, sql: str, params: Optional[DriverParams] = None) -> ResultSet:
        """
        Run one statement already in the driver's parameter style.

        Args:
            sql: Statement text using the adapter's paramstyle
            params: Positional values (qmark) or a mapping (named)
        """

    @abstractmethod
    def unit_of_work(self) -> AsyncContextManager["Connection"]:
        """
        Async context manager around a multi-statement sequence.

        What it guarantees is adapter specific: the server adapter opens a
        real transaction, the embedded adapter only serializes writers.
        """

    async def release(self) -> None:
        """Return the connection to the engine pool. The pool itself stays open."""
        await self._conn.close()


class StorageAdapter(ABC):
    kind: str = ""
    paramstyle: str = ""

    def __init__(self, engine: AsyncEngine):
        self.engine = engine

    @property
    def dialect(self) -> str:
        """SQL dialect name used to pick query fragments ('sqlite', 'postgresql')."""
        return self.engine.dialect.name

    @abstractmethod
    async def connect(self) -> Connection:
        pass

    async def create_schema(self) -> None:
        """Create any missing tables. Safe to run on every startup."""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all, checkfirst=True)
        logger.info("schema_ready", backend=self.kind, tables=sorted(Base.metadata.tables))

    async def seed_if_empty(self) -> bool:
        """
        Insert the sample users and events when the events table is empty.

        Returns:
            True if rows were inserted, False if the store already had events
        """
        async with self.engine.begin() as conn:
            if self.dialect == "postgresql":
                # Workers starting together would both see an empty table
                await conn.execute(text("SELECT pg_advisory_xact_lock(:key)"), {"key": SEED_LOCK_KEY})
            count = (await conn.execute(select(func.count()).select_from(Event.__table__))).scalar()
            if count:
                logger.info("seed_skipped", backend=self.kind, events=count)
                return False

            existing = set(
                (await conn.execute(select(User.__table__.c.username))).scalars().all()
            )
            users = [u for u in sample_users() if u["username"] not in existing]
            if users:
                await conn.execute(insert(User.__table__), users)
            events = sample_events()
            await conn.execute(insert(Event.__table__), events)

        logger.info("seed_inserted", backend=self.kind, users=len(users), events=len(events))
        return True

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("storage_disposed", backend=self.kind)

