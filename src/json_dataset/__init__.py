"""JSON dataset store with dynamic field group-by and sort-by queries."""

from .config import AppSettings, QueryConfig, StoreConfig
from .query.engine import QueryEngine

__all__ = ["AppSettings", "QueryConfig", "QueryEngine", "StoreConfig"]
