"""Tests for the /api/query and /api/history REST endpoints."""

from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from query_agent.models import QueryRecord
from query_agent.server import create_app
from query_agent.storage import JsonResultStore
from query_agent.workflow import NO_WEB_CONTENT_MESSAGE

from .conftest import FakeBrowserFactory, FakeEmbeddings, FakeGenerator, build_workflow


class _ExplodingStore:
    def load(self) -> list[QueryRecord]:
        raise RuntimeError("disk on fire")

    def append(self, record: QueryRecord) -> None:
        raise RuntimeError("disk on fire")


@pytest.fixture()
def client_for(store_path: Path):
    def _make(*, generator=None, browser=None, store=None) -> TestClient:
        workflow = build_workflow(
            store_path,
            generator=generator or FakeGenerator(),
            embeddings=FakeEmbeddings(),
            browser=browser or FakeBrowserFactory(),
            store=store,
        )
        return TestClient(create_app(workflow=workflow))

    return _make


def test_health(client_for) -> None:
    assert client_for().get("/health").json() == {"status": "ok"}


@pytest.mark.parametrize(
    "payload",
    [{}, {"query": ""}, {"query": "   "}, {"query": None}, {"query": ["a"]}, {"query": True}],
)
def test_missing_query_is_rejected(client_for, payload) -> None:
    response = client_for().post("/api/query", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Query parameter is required."}


def test_numeric_query_is_read_as_text(client_for) -> None:
    response = client_for().post("/api/query", json={"query": 123})

    assert response.status_code == 200
    assert response.json()["source"] == "web-search"
    assert response.json()["answer"] == NO_WEB_CONTENT_MESSAGE


def test_invalid_query_answered_by_agent(client_for) -> None:
    response = client_for().post("/api/query", json={"query": "walk my pet"})

    assert response.status_code == 200
    assert response.json() == {
        "answer": "This is not a valid query.",
        "source": "agent",
        "original_query": None,
    }


def test_web_search_answer(client_for, delhi_session, store_path: Path) -> None:
    client = client_for(
        generator=FakeGenerator(responses=["valid.", "Visit the Red Fort."]),
        browser=FakeBrowserFactory(delhi_session),
    )

    response = client.post("/api/query", json={"query": "Best places to visit in Delhi"})

    assert response.status_code == 200
    assert response.json()["source"] == "web-search"
    assert response.json()["answer"] == "Visit the Red Fort."
    assert len(JsonResultStore(str(store_path)).load()) == 1


def test_unexpected_failure_returns_500(client_for) -> None:
    client = client_for(
        generator=FakeGenerator(responses=["valid."]), store=_ExplodingStore()
    )

    response = client.post("/api/query", json={"query": "capital of France"})

    assert response.status_code == 500
    body = response.json()
    assert body["error"] == "An internal server error occurred."
    assert "disk on fire" in body["details"]


def test_history_lists_newest_first(client_for, store_path: Path) -> None:
    store = JsonResultStore(str(store_path))
    for query in ("first", "second", "third"):
        store.append(QueryRecord(query=query, embedding=[1.0], answer=f"{query} answer"))

    response = client_for().get("/api/history", params={"limit": 2})

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 3
    assert [item["query"] for item in data["items"]] == ["third", "second"]
    assert "embedding" not in data["items"][0]
