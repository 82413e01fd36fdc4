"""Tests for the embedding provider."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any

import pytest

from query_agent.embeddings import EmbeddingProvider


# ---------------------------------------------------------------------------
# Mock helpers
# ---------------------------------------------------------------------------


@dataclass
class _FakeEmbedding:
    values: list[float]


@dataclass
class _FakeEmbedResult:
    embeddings: list[_FakeEmbedding]


class _FakeModels:
    """Records calls and returns deterministic embeddings."""

    def __init__(self, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.error = error

    def embed_content(
        self, *, model: str, contents: list[str], config: dict
    ) -> _FakeEmbedResult:
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        dim = config.get("output_dimensionality", 768)
        return _FakeEmbedResult(
            embeddings=[_FakeEmbedding(values=[0.5] * dim) for _ in contents]
        )


class _FakeClient:
    def __init__(self, error: Exception | None = None) -> None:
        self.models = _FakeModels(error)


# ---------------------------------------------------------------------------
# Unit tests (mock-based, no API key needed)
# ---------------------------------------------------------------------------


def test_embed_returns_vector_of_configured_dimension() -> None:
    client = _FakeClient()
    provider = EmbeddingProvider(client=client, dim=4)

    embedding = provider.embed("Best places to visit in Delhi")

    assert embedding == [0.5, 0.5, 0.5, 0.5]
    call = client.models.calls[0]
    assert call["contents"] == ["Best places to visit in Delhi"]
    assert call["config"]["output_dimensionality"] == 4


def test_embed_uses_semantic_similarity_task_type() -> None:
    client = _FakeClient()
    provider = EmbeddingProvider(client=client, dim=4)

    provider.embed("test")

    assert client.models.calls[0]["config"]["task_type"] == "SEMANTIC_SIMILARITY"


def test_embed_returns_none_on_provider_error() -> None:
    client = _FakeClient(error=RuntimeError("quota exceeded"))
    provider = EmbeddingProvider(client=client, dim=4)

    assert provider.embed("test") is None


def test_embed_query_propagates_provider_error() -> None:
    client = _FakeClient(error=RuntimeError("quota exceeded"))
    provider = EmbeddingProvider(client=client, dim=4)

    with pytest.raises(RuntimeError, match="quota"):
        provider.embed_query("test")


def test_env_overrides(monkeypatch) -> None:
    client = _FakeClient()
    monkeypatch.setenv("QUERY_AGENT_EMBEDDING_MODEL", "custom-model-001")
    monkeypatch.setenv("QUERY_AGENT_EMBEDDING_DIM", "256")

    provider = EmbeddingProvider(client=client)

    assert provider.model == "custom-model-001"
    assert provider.dim == 256

    provider.embed("test")
    call = client.models.calls[0]
    assert call["model"] == "custom-model-001"
    assert call["config"]["output_dimensionality"] == 256


def test_missing_api_key_raises(monkeypatch) -> None:
    monkeypatch.delenv("GOOGLE_API_KEY", raising=False)
    with pytest.raises(ValueError, match="GOOGLE_API_KEY"):
        EmbeddingProvider(api_key=None, client=None)


# ---------------------------------------------------------------------------
# Real API integration test (skipped unless GOOGLE_API_KEY is set)
# ---------------------------------------------------------------------------


@pytest.mark.skipif(
    not os.getenv("GOOGLE_API_KEY"),
    reason="GOOGLE_API_KEY not set — skipping real embedding test",
)
def test_real_embedding_api() -> None:
    provider = EmbeddingProvider(dim=128)

    embedding = provider.embed_query("Best places to visit in Delhi")

    assert len(embedding) == 128
    assert all(isinstance(v, float) for v in embedding)
