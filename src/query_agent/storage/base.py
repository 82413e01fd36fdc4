"""
Storage interface for resolved query persistence.
"""

from __future__ import annotations

from typing import Protocol

from ..models import QueryRecord


class ResultStore(Protocol):
    """Protocol for the durable, append-only record of resolved queries."""

    def load(self) -> list[QueryRecord]:
        """Return every stored record in append order.

        A store that does not exist yet, or cannot be read, yields an empty list.
        """

    def append(self, record: QueryRecord) -> None:
        """Persist one more record after all existing ones."""
