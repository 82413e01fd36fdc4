from __future__ import annotations

from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest

from query_agent.cache import SimilarityCache
from query_agent.classifier import TextClassifier
from query_agent.retrieval import WebRetriever
from query_agent.storage import JsonResultStore
from query_agent.summarizer import Summarizer
from query_agent.workflow import QueryResolutionWorkflow


LONG_TEXT = (
    "Delhi is the capital of India and home to the Red Fort, Qutub Minar, "
    "India Gate, Humayun's Tomb and the bustling lanes of Chandni Chowk. "
) * 3


class FakeGenerator:
    """Returns queued responses in order and records every call."""

    def __init__(
        self, responses: list[str] | None = None, error: Exception | None = None
    ) -> None:
        self.responses = list(responses or [])
        self.error = error
        self.calls: list[dict[str, Any]] = []

    async def generate(
        self,
        prompt: str,
        *,
        system_instruction: str,
        temperature: float,
        max_output_tokens: int | None = None,
    ) -> str:
        self.calls.append(
            {
                "prompt": prompt,
                "system_instruction": system_instruction,
                "temperature": temperature,
                "max_output_tokens": max_output_tokens,
            }
        )
        if self.error is not None:
            raise self.error
        return self.responses.pop(0) if self.responses else ""


class FakeEmbeddings:
    """Letter-frequency embeddings: identical texts get identical vectors."""

    def __init__(self, *, fail: bool = False) -> None:
        self.fail = fail
        self.calls: list[str] = []

    def embed(self, text: str) -> list[float] | None:
        self.calls.append(text)
        if self.fail:
            return None
        vector = [0.0] * 26
        for char in text.lower():
            if "a" <= char <= "z":
                vector[ord(char) - ord("a")] += 1.0
        return vector


@dataclass
class FakeSession:
    """In-memory browser session keyed by URL substrings."""

    links: dict[str, list[str]] = field(default_factory=dict)
    texts: dict[str, str | dict[str, str] | Exception] = field(default_factory=dict)
    failing: set[str] = field(default_factory=set)
    missing_containers: set[str] = field(default_factory=set)
    visited: list[str] = field(default_factory=list)
    gotos: list[dict[str, Any]] = field(default_factory=list)
    settles: list[float] = field(default_factory=list)
    page_text_calls: list[dict[str, Any]] = field(default_factory=list)
    current_url: str = ""

    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None:
        self.visited.append(url)
        self.gotos.append({"url": url, "timeout_ms": timeout_ms, "wait_until": wait_until})
        if any(marker in url for marker in self.failing):
            raise TimeoutError(f"Timeout navigating to {url}")
        self.current_url = url

    async def settle(self, delay_ms: float) -> None:
        self.settles.append(delay_ms)

    async def wait_for_selector(self, selector: str, *, timeout_ms: float) -> None:
        if any(marker in self.current_url for marker in self.missing_containers):
            raise TimeoutError(f"Timeout waiting for {selector}")

    async def link_hrefs(self, selector: str, limit: int) -> list[str]:
        for marker, hrefs in self.links.items():
            if marker in self.current_url:
                return hrefs[:limit]
        return []

    async def page_text(
        self,
        *,
        remove_selectors: tuple[str, ...],
        content_selectors: tuple[str, ...],
        min_chars: int,
    ) -> str:
        self.page_text_calls.append(
            {
                "remove_selectors": remove_selectors,
                "content_selectors": content_selectors,
                "min_chars": min_chars,
            }
        )
        text = self.texts.get(self.current_url, "")
        if isinstance(text, Exception):
            raise text
        if isinstance(text, str):
            return text
        # A dict maps selectors to element text and behaves like a tiny DOM.
        elements = {
            selector: value
            for selector, value in text.items()
            if selector not in remove_selectors
        }
        for selector in content_selectors:
            candidate = elements.get(selector, "").strip()
            if len(candidate) > min_chars:
                return candidate
        return "\n".join(elements.values()).strip()


class FakeBrowserFactory:
    """Hands out one FakeSession and counts how often it was opened and closed."""

    def __init__(
        self, session: FakeSession | None = None, launch_error: Exception | None = None
    ) -> None:
        self.session = session or FakeSession()
        self.launch_error = launch_error
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def __call__(self):
        if self.launch_error is not None:
            raise self.launch_error
        self.opened += 1
        try:
            yield self.session
        finally:
            self.closed += 1



def build_workflow(
    store_path: Path,
    *,
    generator: FakeGenerator,
    embeddings: FakeEmbeddings,
    browser: FakeBrowserFactory,
    store: Any | None = None,
) -> QueryResolutionWorkflow:
    store = store or JsonResultStore(str(store_path))
    return QueryResolutionWorkflow(
        classifier=TextClassifier(generator),
        cache=SimilarityCache(store, embeddings, threshold=0.85),
        retriever=WebRetriever(browser_factory=browser),
        summarizer=Summarizer(generator),
        store=store,
        embeddings=embeddings,
        timeout=10,
    )


@pytest.fixture()
def store_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "past_queries.json"


@pytest.fixture()
def delhi_session() -> FakeSession:
    return FakeSession(
        links={
            "duckduckgo.com": [
                "https://duckduckgo.com/settings",
                "https://www.lonelyplanet.com/india/delhi",
                "https://en.wikipedia.org/wiki/Delhi",
            ]
        },
        texts={
            "https://www.lonelyplanet.com/india/delhi": LONG_TEXT,
            "https://en.wikipedia.org/wiki/Delhi": LONG_TEXT,
        },
    )
