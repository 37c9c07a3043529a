"""
Storage backend selection.
Decides once per process which adapter serves every request.

Selection:
- Production: ServerAdapter (PostgreSQL), always
- Anywhere else: EmbeddedAdapter (SQLite file)
- DB_TYPE=server opts a non-production process into the server adapter
"""

from functools import lru_cache
from typing import Optional

from tickettango.core.config import Settings, get_settings
from tickettango.infrastructure.adapters import EmbeddedAdapter, ServerAdapter, StorageAdapter

EMBEDDED = "embedded"
SERVER = "server"
BACKENDS = (EMBEDDED, SERVER)


def select_backend(environment: str, override: Optional[str] = None) -> str:
    """Pure decision: no I/O, same answer for the same inputs."""
    if override is not None and override not in BACKENDS:
        raise ValueError(f"Unsupported DB_TYPE '{override}', expected one of {BACKENDS}")
    if environment == "production":
        return SERVER
    if override == SERVER:
        return SERVER
    return EMBEDDED


@lru_cache()
def get_backend_kind() -> str:
    """Backend for this process. Cached: switching mid-process is unsupported."""
    settings = get_settings()
    return select_backend(settings.ENVIRONMENT, settings.DB_TYPE)


def create_adapter(kind: str, settings: Optional[Settings] = None) -> StorageAdapter:
    settings = settings or get_settings()
    if kind == SERVER:
        return ServerAdapter(settings.DATABASE_URL, settings)
    if kind == EMBEDDED:
        return EmbeddedAdapter(settings.SQLITE_PATH)
    raise ValueError(f"Unsupported storage backend: {kind}")
