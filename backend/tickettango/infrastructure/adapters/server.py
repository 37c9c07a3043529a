"""
Networked server storage (PostgreSQL through asyncpg).

Connections come from a shared pool. Outside a unit of work each statement
commits on its own; inside unit_of_work() the statements run in one explicit
transaction that is rolled back on any exception, so a failed multi-step
sequence leaves no partial state behind.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Mapping, Optional

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import create_async_engine

from tickettango.core.config import Settings
from tickettango.core.logging import get_logger
from tickettango.infrastructure.adapters.base import Connection, ResultSet, StorageAdapter
from tickettango.infrastructure.adapters.embedded import to_driver_value

logger = get_logger(__name__)


class ServerConnection(Connection):
    def __init__(self, conn):
        super().__init__(conn)
        self._in_transaction = False

    async def execute(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> ResultSet:
        values = dict(params or {})
        if self._conn.dialect.name == "sqlite":
            # sqlite3 binds neither Decimal nor aware datetimes
            values = {name: to_driver_value(value) for name, value in values.items()}
        result = await self._conn.execute(text(sql), values)
        if result.returns_rows:
            result_set = ResultSet(rows=[dict(row) for row in result.mappings().all()])
        else:
            lastrowid = result.lastrowid if self._conn.dialect.name == "sqlite" else None
            result_set = ResultSet(rowcount=result.rowcount, lastrowid=lastrowid)

        if not self._in_transaction:
            await self._conn.commit()
        return result_set

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator["ServerConnection"]:
        self._in_transaction = True
        try:
            async with self._conn.begin():
                yield self
        except BaseException as exc:
            logger.info("transaction_rolled_back", reason=type(exc).__name__)
            raise
        finally:
            self._in_transaction = False


class ServerAdapter(StorageAdapter):
    kind = "server"
    paramstyle = "named"

    def __init__(self, url: str, settings: Optional[Settings] = None):
        self.url = url
        engine_options: dict[str, Any] = {"pool_pre_ping": True}
        if settings is not None and make_url(url).get_backend_name() != "sqlite":
            engine_options.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )
        super().__init__(create_async_engine(url, **engine_options))

    async def connect(self) -> ServerConnection:
        conn = await self.engine.connect()
        return ServerConnection(conn)
