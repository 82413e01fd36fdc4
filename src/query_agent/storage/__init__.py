"""Result stores for resolved queries."""

from .base import ResultStore
from .duckdb import DuckDBResultStore
from .factory import open_result_store
from .json_store import JsonResultStore

__all__ = [
    "ResultStore",
    "DuckDBResultStore",
    "JsonResultStore",
    "open_result_store",
]
