"""
Select a result store implementation from its path.
"""

from __future__ import annotations

from pathlib import Path

from ..config import resolve_store_path
from .base import ResultStore
from .duckdb import DuckDBResultStore
from .json_store import JsonResultStore

DUCKDB_SUFFIXES: frozenset[str] = frozenset({".duckdb", ".db"})


def open_result_store(path: str | None = None) -> ResultStore:
    """Open the store at *path* (or the configured default).

    Paths ending in ``.duckdb``/``.db`` use DuckDB; everything else is a JSON file.
    """
    resolved = resolve_store_path(path)
    if Path(resolved).suffix.lower() in DUCKDB_SUFFIXES:
        return DuckDBResultStore(resolved)
    return JsonResultStore(resolved)
