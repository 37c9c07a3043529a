"""
Embedded single-file storage (SQLite through aiosqlite).

The engine runs in AUTOCOMMIT mode: every statement is its own atomic unit
and no multi-statement transaction is offered to callers. SQLite already
queues concurrent writers at the file level, but a read-then-write sequence
spread over two statements is not protected by that. unit_of_work() closes
the gap inside one process with a single-writer lock; it does not roll
anything back if a later statement fails.

Use when:
- Local development and tests
- Single-process, low-concurrency deployments
"""

import asyncio
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Optional, Sequence

from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine

from tickettango.core.logging import get_logger
from tickettango.infrastructure.adapters.base import Connection, ResultSet, StorageAdapter

logger = get_logger(__name__)

# Matches SQLAlchemy's SQLite DateTime storage format so rows written through
# raw SQL compare and sort correctly against rows written by the ORM layer.
SQLITE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S.%f"


def to_driver_value(value: Any) -> Any:
    """Convert a Python value into something sqlite3 binds natively."""
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc).replace(tzinfo=None)
        return value.strftime(SQLITE_TIMESTAMP_FORMAT)
    if isinstance(value, Decimal):
        return str(value)
    return value


class EmbeddedConnection(Connection):
    def __init__(self, conn, writer_lock: asyncio.Lock):
        super().__init__(conn)
        self._writer_lock = writer_lock

    async def execute(self, sql: str, params: Optional[Sequence[Any]] = None) -> ResultSet:
        values = tuple(to_driver_value(v) for v in (params or ()))
        result = await self._conn.exec_driver_sql(sql, values)
        if result.returns_rows:
            return ResultSet(rows=[dict(row) for row in result.mappings().all()])
        return ResultSet(rowcount=result.rowcount, lastrowid=result.lastrowid)

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["EmbeddedConnection"]:
        async with self._writer_lock:
            yield self


class EmbeddedAdapter(StorageAdapter):
    kind = "embedded"
    paramstyle = "qmark"

    def __init__(self, path: str):
        self.path = path
        engine = create_async_engine(
            f"sqlite+aiosqlite:///{path}",
            isolation_level="AUTOCOMMIT",
            connect_args={"timeout": 30},
        )
        event.listen(engine.sync_engine, "connect", _configure_sqlite)
        super().__init__(engine)
        # Process-wide: every connection handed out by this adapter shares it
        self.writer_lock = asyncio.Lock()

    async def connect(self) -> EmbeddedConnection:
        conn = await self.engine.connect()
        return EmbeddedConnection(conn, self.writer_lock)


def _configure_sqlite(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys = ON")
    cursor.execute("PRAGMA journal_mode = WAL")
    cursor.close()
