from tickettango.infrastructure.adapters.base import Connection, ResultSet, StorageAdapter
from tickettango.infrastructure.adapters.embedded import EmbeddedAdapter
from tickettango.infrastructure.adapters.server import ServerAdapter

__all__ = ["Connection", "ResultSet", "StorageAdapter", "EmbeddedAdapter", "ServerAdapter"]
