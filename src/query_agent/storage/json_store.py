"""
JSON file storage backend for resolved queries.

The whole history lives in one pretty-printed JSON array. Every append
rewrites the full file, so writers inside a process are serialized through a
lock and the file is swapped in atomically.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..models import QueryRecord

logger = logging.getLogger(__name__)


class JsonResultStore:
    """Persist query records as a JSON array on disk."""

    def __init__(self, path: str) -> None:
        self.path = str(Path(path).expanduser().resolve())
        self._lock = threading.Lock()

    def load(self) -> list[QueryRecord]:
        raw = self._read_raw()
        records: list[QueryRecord] = []
        for position, item in enumerate(raw):
            try:
                records.append(QueryRecord.model_validate(item))
            except ValidationError as exc:
                logger.warning(
                    "Skipping malformed record #%d in %s: %s", position, self.path, exc
                )
        return records

    def append(self, record: QueryRecord) -> None:
        with self._lock:
            # Entries that fail validation are kept on disk untouched.
            raw = self._read_raw()
            raw.append(record.to_json_dict())
            try:
                self._write_all(raw)
            except OSError:
                logger.exception("Error saving past queries to %s", self.path)
                return
        logger.info("Stored result for %r (%d records)", record.query, len(raw))

    def _read_raw(self) -> list[Any]:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning("%s not found, starting with an empty history", self.path)
            return []
        except (OSError, ValueError):
            logger.exception("Error loading past queries from %s", self.path)
            return []
        if not isinstance(data, list):
            logger.error(
                "Expected a JSON array in %s, found %s", self.path, type(data).__name__
            )
            return []
        return data

    def _write_all(self, payload: list[Any]) -> None:
        target = Path(self.path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(target.parent), prefix=f".{target.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(payload, f, indent=2)
            os.replace(tmp_path, target)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
