"""Web retrieval through headless browser automation."""

from .browser import BrowserFactory, BrowserSession, PlaywrightSession, playwright_factory
from .profiles import (
    CONTENT_SELECTORS,
    DEFAULT_BACKENDS,
    NON_CONTENT_SELECTORS,
    SearchBackendProfile,
    filter_result_links,
)
from .retriever import (
    RetrievalPhase,
    RetrieverSettings,
    ScrapedPage,
    WebRetriever,
    normalize_whitespace,
)

__all__ = [
    "BrowserFactory",
    "BrowserSession",
    "PlaywrightSession",
    "playwright_factory",
    "CONTENT_SELECTORS",
    "DEFAULT_BACKENDS",
    "NON_CONTENT_SELECTORS",
    "SearchBackendProfile",
    "filter_result_links",
    "RetrievalPhase",
    "RetrieverSettings",
    "ScrapedPage",
    "WebRetriever",
    "normalize_whitespace",
]
