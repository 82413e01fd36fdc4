"""
Embedding provider for query similarity lookups.

Wraps the Google GenAI embedding API. Failures are reported as ``None`` so
callers can treat a missing embedding as a cache miss instead of an error.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Protocol

from google.genai import Client as GenAIClient

logger = logging.getLogger(__name__)

_DEFAULT_MODEL = "gemini-embedding-001"
_DEFAULT_DIM = 768
_DEFAULT_TASK_TYPE = "SEMANTIC_SIMILARITY"


class EmbeddingClient(Protocol):
    def embed(self, text: str) -> list[float] | None:
        """Return the embedding of *text*, or None when unavailable."""


class EmbeddingProvider:
    """Generate text embeddings via Google GenAI."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        dim: int | None = None,
        task_type: str = _DEFAULT_TASK_TYPE,
        client: Any | None = None,
    ) -> None:
        self.model = model or os.getenv("QUERY_AGENT_EMBEDDING_MODEL", _DEFAULT_MODEL)
        self.dim = dim or int(os.getenv("QUERY_AGENT_EMBEDDING_DIM", str(_DEFAULT_DIM)))
        self.task_type = task_type

        if client is not None:
            self._client = client
        else:
            resolved_key = api_key or os.getenv("GOOGLE_API_KEY")
            if resolved_key is None:
                raise ValueError(
                    "GOOGLE_API_KEY not found. "
                    "Provide api_key or set the environment variable."
                )
            self._client = GenAIClient(api_key=resolved_key)

    def embed_query(self, text: str) -> list[float]:
        """Embed a single text. Provider errors propagate."""
        result = self._client.models.embed_content(
            model=self.model,
            contents=[text],
            config={
                "task_type": self.task_type,
                "output_dimensionality": self.dim,
            },
        )
        return [float(v) for v in result.embeddings[0].values]

    def embed(self, text: str) -> list[float] | None:
        """Embed *text*, returning None if the provider call fails."""
        try:
            return self.embed_query(text)
        except Exception as exc:
            logger.warning("Error getting embedding from %s: %s", self.model, exc)
            return None
