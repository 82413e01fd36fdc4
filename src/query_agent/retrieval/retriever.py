"""
Web retrieval: find result links on a search engine, then read those pages.

Retrieval is a small state machine over one browser session:

    DISCOVERING_LINKS -> EXTRACTING_CONTENT -> DONE
    DISCOVERING_LINKS -> DONE                  (no backend produced links)

Failures of a single backend or a single page are logged and skipped; the
retriever itself only ever returns a (possibly empty) list of page texts.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass, field

from .browser import BrowserFactory, BrowserSession, playwright_factory
from .profiles import (
    CONTENT_SELECTORS,
    DEFAULT_BACKENDS,
    NON_CONTENT_SELECTORS,
    SearchBackendProfile,
    filter_result_links,
)

logger = logging.getLogger(__name__)

_INLINE_WS_RE = re.compile(r"[^\S\n]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n+")


@dataclass(frozen=True)
class RetrieverSettings:
    """Timeouts (seconds) and limits for one retrieval."""

    search_timeout: float = 30.0
    search_settle: float = 3.0
    container_timeout: float = 10.0
    links_per_backend: int = 5
    max_pages: int = 3
    page_timeout: float = 15.0
    page_settle: float = 2.0
    max_page_chars: int = 5000
    min_page_chars: int = 100


@dataclass(frozen=True)
class ScrapedPage:
    url: str
    text: str


class RetrievalPhase(enum.Enum):
    DISCOVERING_LINKS = "discovering_links"
    EXTRACTING_CONTENT = "extracting_content"
    DONE = "done"


@dataclass
class RetrievalState:
    query: str
    phase: RetrievalPhase = RetrievalPhase.DISCOVERING_LINKS
    links: list[str] = field(default_factory=list)
    backend: str | None = None
    pages: list[ScrapedPage] = field(default_factory=list)


def normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces/tabs and blank lines."""
    text = _INLINE_WS_RE.sub(" ", text)
    text = _BLANK_LINES_RE.sub("\n", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def _ms(seconds: float) -> float:
    return seconds * 1000


class WebRetriever:
    """Search the web with fallback backends and extract readable page text."""

    def __init__(
        self,
        *,
        backends: tuple[SearchBackendProfile, ...] = DEFAULT_BACKENDS,
        content_selectors: tuple[str, ...] = CONTENT_SELECTORS,
        non_content_selectors: tuple[str, ...] = NON_CONTENT_SELECTORS,
        settings: RetrieverSettings | None = None,
        browser_factory: BrowserFactory | None = None,
    ) -> None:
        self.backends = backends
        self.content_selectors = content_selectors
        self.non_content_selectors = non_content_selectors
        self.settings = settings or RetrieverSettings()
        self._browser_factory = browser_factory or playwright_factory()

    async def retrieve(self, query: str) -> list[str]:
        """Return up to ``max_pages`` page texts relevant to *query*."""
        state = RetrievalState(query=query)
        try:
            async with self._browser_factory() as session:
                while state.phase is not RetrievalPhase.DONE:
                    if state.phase is RetrievalPhase.DISCOVERING_LINKS:
                        await self._discover_links(session, state)
                    else:
                        await self._extract_content(session, state)
        except Exception as exc:
            logger.error("Error during web search and scraping: %s", exc)
        logger.info(
            "Retrieved %d pages for %r via %s",
            len(state.pages),
            query,
            state.backend or "no backend",
        )
        return [page.text for page in state.pages]

    async def _discover_links(self, session: BrowserSession, state: RetrievalState) -> None:
        for backend in self.backends:
            logger.info("Trying %s for query: %r", backend.name, state.query)
            try:
                links = await self._search_backend(session, backend, state.query)
            except Exception as exc:
                logger.warning("%s failed: %s", backend.name, exc)
                continue
            if links:
                logger.info("Found %d links using %s", len(links), backend.name)
                state.links = links
                state.backend = backend.name
                state.phase = RetrievalPhase.EXTRACTING_CONTENT
                return
        logger.warning("No search results found from any search engine")
        state.phase = RetrievalPhase.DONE

    async def _search_backend(
        self,
        session: BrowserSession,
        backend: SearchBackendProfile,
        query: str,
    ) -> list[str]:
        settings = self.settings
        await session.goto(
            backend.build_url(query),
            timeout_ms=_ms(settings.search_timeout),
            wait_until="networkidle",
        )
        await session.settle(_ms(settings.search_settle))
        try:
            await session.wait_for_selector(
                backend.container_selector,
                timeout_ms=_ms(settings.container_timeout),
            )
        except Exception:
            logger.info(
                "Container not found for %s, reading links without it", backend.name
            )
        hrefs = await session.link_hrefs(
            backend.result_selector, settings.links_per_backend
        )
        return filter_result_links(hrefs, self.backends)

    async def _extract_content(self, session: BrowserSession, state: RetrievalState) -> None:
        for link in state.links[: self.settings.max_pages]:
            try:
                page = await self._scrape_page(session, link)
            except Exception as exc:
                logger.warning("Could not scrape %s: %s", link, exc)
                continue
            if page is not None:
                logger.info("Scraped %d characters from %s", len(page.text), link)
                state.pages.append(page)
        state.phase = RetrievalPhase.DONE

    async def _scrape_page(self, session: BrowserSession, url: str) -> ScrapedPage | None:
        settings = self.settings
        await session.goto(
            url,
            timeout_ms=_ms(settings.page_timeout),
            wait_until="domcontentloaded",
        )
        await session.settle(_ms(settings.page_settle))
        raw = await session.page_text(
            remove_selectors=self.non_content_selectors,
            content_selectors=self.content_selectors,
            min_chars=settings.min_page_chars,
        )
        text = normalize_whitespace(raw)[: settings.max_page_chars]
        if len(text) <= settings.min_page_chars:
            return None
        return ScrapedPage(url=url, text=text)
