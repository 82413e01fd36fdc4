"""
Semantic cache over previously resolved queries.

Every lookup reloads the store and scans it linearly, comparing the query
embedding against each stored embedding. Cost is O(n * D) per lookup with no
index, which is fine while the history stays small.
"""

from __future__ import annotations

import logging
import math
from typing import Callable, Sequence

from .config import resolve_similarity_threshold
from .embeddings import EmbeddingClient
from .models import QueryRecord
from .storage import ResultStore

logger = logging.getLogger(__name__)

SimilarityFn = Callable[[Sequence[float], Sequence[float]], float]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine of the angle between *a* and *b*, in [-1, 1].

    Raises ValueError when the vectors have different dimensions.
    """
    if len(a) != len(b):
        raise ValueError(f"Dimension mismatch: {len(a)} != {len(b)}")
    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b):
        dot += x * y
        norm_a += x * x
        norm_b += y * y
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


class SimilarityCache:
    """Find a stored answer for a semantically similar past query."""

    def __init__(
        self,
        store: ResultStore,
        embeddings: EmbeddingClient,
        *,
        threshold: float | None = None,
        similarity: SimilarityFn = cosine_similarity,
    ) -> None:
        self.store = store
        self.embeddings = embeddings
        self.threshold = resolve_similarity_threshold(threshold)
        self.similarity = similarity

    def find_similar(self, query: str) -> QueryRecord | None:
        """Return the first stored record whose similarity reaches the threshold."""
        records = self.store.load()
        if not records:
            return None

        query_embedding = self.embeddings.embed(query)
        if query_embedding is None:
            logger.warning(
                "Could not generate embedding for current query. Cannot perform similarity check."
            )
            return None

        for record in records:
            if not record.embedding:
                logger.warning(
                    "Past query %r missing embedding, skipping similarity check.",
                    record.query,
                )
                continue
            if len(record.embedding) != len(query_embedding):
                logger.warning(
                    "Past query %r has embedding dimension %d, expected %d; skipping.",
                    record.query,
                    len(record.embedding),
                    len(query_embedding),
                )
                continue
            # First match in store order wins, not the best-scoring one.
            if self.similarity(query_embedding, record.embedding) >= self.threshold:
                return record
        return None
