"""
DuckDB storage backend for resolved queries.

Unlike the JSON file store, appends are single-row inserts, so concurrent
writers never rewrite each other's history.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any

import duckdb

from ..models import QueryRecord

logger = logging.getLogger(__name__)


class DuckDBResultStore:
    """DuckDB-backed persistence for query records."""

    def __init__(self, db_path: str, *, initialize: bool = True) -> None:
        self.db_path = str(Path(db_path).expanduser().resolve())
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self._conn = duckdb.connect(self.db_path)
        self._lock = threading.Lock()
        if initialize:
            self.initialize()

    def close(self) -> None:
        """Close the underlying DuckDB connection."""
        self._conn.close()

    def initialize(self) -> None:
        self._conn.execute("CREATE SEQUENCE IF NOT EXISTS query_records_seq START 1;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS query_records (
                id BIGINT PRIMARY KEY DEFAULT nextval('query_records_seq'),
                query_text VARCHAR NOT NULL,
                embedding DOUBLE[],
                answer VARCHAR NOT NULL,
                created_at VARCHAR NOT NULL
            );
            """
        )

    def load(self) -> list[QueryRecord]:
        try:
            with self._lock:
                rows = self._conn.execute(
                    """
                    SELECT query_text, embedding, answer, created_at
                    FROM query_records
                    ORDER BY id
                    """
                ).fetchall()
        except duckdb.Error:
            logger.exception("Error loading past queries from %s", self.db_path)
            return []
        return [self._row_to_record(row) for row in rows]

    def append(self, record: QueryRecord) -> None:
        payload = record.to_json_dict()
        try:
            with self._lock:
                self._conn.execute(
                    """
                    INSERT INTO query_records (query_text, embedding, answer, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    [
                        payload["query"],
                        payload["embedding"],
                        payload["results"],
                        payload["timestamp"],
                    ],
                )
        except duckdb.Error:
            logger.exception("Error saving past query to %s", self.db_path)
            return
        logger.info("Stored result for %r", record.query)

    def count(self) -> int:
        with self._lock:
            row = self._conn.execute("SELECT COUNT(*) FROM query_records").fetchone()
        return int(row[0]) if row else 0

    @staticmethod
    def _row_to_record(row: tuple[Any, ...]) -> QueryRecord:
        return QueryRecord.model_validate(
            {
                "query": row[0],
                "embedding": list(row[1]) if row[1] is not None else None,
                "results": row[2],
                "timestamp": row[3],
            }
        )
