"""
Infrastructure layer - storage engines and the query service on top of them.
Keeps business logic clean from engine details.
"""

from .query import QueryService, QueryParameterError
from .selector import create_adapter, get_backend_kind, select_backend

__all__ = [
    "QueryService",
    "QueryParameterError",
    "create_adapter",
    "get_backend_kind",
    "select_backend",
]
