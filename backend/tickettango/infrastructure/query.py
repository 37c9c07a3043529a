"""
Query service: one query form for every storage backend.

Callers write SQL with named placeholders (``:name``) and pass a mapping of
values. bind() rewrites that into whatever the active adapter's driver
expects:

  qmark  (embedded)  ``WHERE id = :id AND x = :id``  ->  ``WHERE id = ? AND x = ?``, [5, 5]
  named  (server)    unchanged, bound through SQLAlchemy text()

SQL that genuinely differs between engines is resolved through
DIALECT_FRAGMENTS (or adapt() for one-off twins) so request handlers never
branch on the backend themselves.
"""

import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, AsyncIterator, Mapping, Optional

from tickettango.infrastructure.adapters.base import Connection, DriverParams, ResultSet, StorageAdapter

# A quoted literal (skipped) or a :name placeholder. "::" casts are not placeholders.
_PLACEHOLDER_RE = re.compile(r"'(?:[^']|'')*'|(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")

MONEY_QUANTUM = Decimal("0.01")

# logical operation -> dialect -> fragment (canonical placeholders)
DIALECT_FRAGMENTS: dict[str, dict[str, str]] = {
    "paginate": {
        "sqlite": " LIMIT :limit OFFSET :offset",
        "postgresql": " OFFSET :offset ROWS FETCH NEXT :limit ROWS ONLY",
    },
    "top_n": {
        "sqlite": " LIMIT :limit",
        "postgresql": " FETCH FIRST :limit ROWS ONLY",
    },
    "lock_for_update": {
        "sqlite": "",
        "postgresql": " FOR UPDATE",
    },
    "returning_id": {
        "sqlite": "",
        "postgresql": " RETURNING id",
    },
    "contains": {
        "sqlite": "LIKE",
        "postgresql": "ILIKE",
    },
}


class QueryParameterError(ValueError):
    """A placeholder in the SQL has no value in the supplied parameters."""


def placeholder_names(sql: str) -> list[str]:
    """Placeholder names in order of appearance, repeats included."""
    return [m.group(1) for m in _PLACEHOLDER_RE.finditer(sql) if m.group(1)]


def to_qmark(sql: str, params: Mapping[str, Any]) -> tuple[str, list[Any]]:
    values: list[Any] = []

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name is None:
            return match.group(0)
        if name not in params:
            raise QueryParameterError(f"No value supplied for parameter '{name}'")
        values.append(params[name])
        return "?"

    return _PLACEHOLDER_RE.sub(_replace, sql), values


def check_named(sql: str, params: Mapping[str, Any]) -> dict[str, Any]:
    missing = [name for name in placeholder_names(sql) if name not in params]
    if missing:
        raise QueryParameterError(f"No value supplied for parameter '{missing[0]}'")
    return dict(params)


def coerce_timestamp(value: Any) -> datetime:
    """Timezone-aware UTC datetime from a driver value (datetime or ISO text)."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if not isinstance(value, datetime):
        raise TypeError(f"Expected a timestamp, got {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def coerce_money(value: Any) -> Decimal:
    # str() first so SQLite's REAL 89.99 does not become 89.9899999...
    return Decimal(str(value)).quantize(MONEY_QUANTUM)


class QueryService:
    def __init__(self, adapter: StorageAdapter):
        self.adapter = adapter

    @property
    def backend(self) -> str:
        return self.adapter.kind

    @property
    def dialect(self) -> str:
        return self.adapter.dialect

    def bind(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> tuple[str, DriverParams]:
        params = params or {}
        if self.adapter.paramstyle == "qmark":
            return to_qmark(sql, params)
        if self.adapter.paramstyle == "named":
            return sql, check_named(sql, params)
        raise ValueError(f"Unsupported paramstyle: {self.adapter.paramstyle}")

    def adapt(self, **variants: str) -> str:
        """
        Pick the variant written for the active dialect.

        Usage:
            db.adapt(sqlite="... LIMIT 6", postgresql="... FETCH FIRST 6 ROWS ONLY")
        """
        try:
            return variants[self.dialect]
        except KeyError:
            raise ValueError(f"No query variant for dialect '{self.dialect}'") from None

    def fragment(self, operation: str) -> str:
        try:
            variants = DIALECT_FRAGMENTS[operation]
        except KeyError:
            raise ValueError(f"Unknown query operation '{operation}'") from None
        return self.adapt(**variants)

    async def execute(
        self, conn: Connection, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> ResultSet:
        driver_sql, driver_params = self.bind(sql, params)
        return await conn.execute(driver_sql, driver_params)

    async def query(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> ResultSet:
        # Bind before connecting so a bad parameter never checks out a connection
        driver_sql, driver_params = self.bind(sql, params)
        conn = await self.adapter.connect()
        try:
            return await conn.execute(driver_sql, driver_params)
        finally:
            await conn.release()

    async def insert_returning_id(
        self, conn: Connection, sql: str, params: Optional[Mapping[str, Any]] = None
    ) -> int:
        result = await self.execute(conn, sql + self.fragment("returning_id"), params)
        if result.rows:
            return int(result.rows[0]["id"])
        return int(result.lastrowid)

    async def insert(self, sql: str, params: Optional[Mapping[str, Any]] = None) -> int:
        """Run a single INSERT on its own connection and return the new id."""
        self.bind(sql, params)
        conn = await self.adapter.connect()
        try:
            return await self.insert_returning_id(conn, sql, params)
        finally:
            await conn.release()

    @asynccontextmanager
    async def unit_of_work(self) -> AsyncIterator[Connection]:
        conn = await self.adapter.connect()
        try:
            async with conn.unit_of_work():
                yield conn
        finally:
            await conn.release()
