"""
Search backends and page-extraction selectors.

Both lists are ordered: backends are tried in sequence until one yields
links, and content selectors are tried in sequence until one yields enough
text. Adding a backend or selector only means adding an entry here.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote_plus, urlparse


@dataclass(frozen=True)
class SearchBackendProfile:
    """How to query one search engine and where its result links live."""

    name: str
    url_template: str
    container_selector: str
    result_selector: str
    domain: str

    def build_url(self, query: str) -> str:
        return self.url_template.format(query=quote_plus(query))


DEFAULT_BACKENDS: tuple[SearchBackendProfile, ...] = (
    SearchBackendProfile(
        name="DuckDuckGo",
        url_template="https://duckduckgo.com/?q={query}",
        container_selector='ol[data-testid="results"]',
        result_selector='a[data-testid="result-title-a"]',
        domain="duckduckgo.com",
    ),
    SearchBackendProfile(
        name="Bing",
        url_template="https://www.bing.com/search?q={query}",
        container_selector="#b_results",
        result_selector="h2 a",
        domain="bing.com",
    ),
    SearchBackendProfile(
        name="Searx",
        url_template="https://searx.be/search?q={query}",
        container_selector="#results",
        result_selector="h3 a",
        domain="searx.be",
    ),
)

# Removed from a page before its text is read.
NON_CONTENT_SELECTORS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "svg",
    "button",
    "input",
    "textarea",
    "select",
    "form",
    "header",
    "footer",
    "nav",
    "aside",
    '[role="navigation"]',
    '[role="banner"]',
    '[role="contentinfo"]',
    ".advertisement",
    ".ads",
    "#comments",
    ".comment",
)

CONTENT_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    '[role="main"]',
    ".content",
    ".main-content",
    "#content",
    ".post",
    ".entry-content",
)


def is_backend_link(href: str, backends: tuple[SearchBackendProfile, ...]) -> bool:
    host = (urlparse(href).hostname or "").lower()
    for backend in backends:
        if host == backend.domain or host.endswith("." + backend.domain):
            return True
    return False


def filter_result_links(
    hrefs: list[str],
    backends: tuple[SearchBackendProfile, ...],
) -> list[str]:
    """Keep absolute http(s) links that do not point back at a search engine."""
    links: list[str] = []
    for href in hrefs:
        if not href:
            continue
        if urlparse(href).scheme not in ("http", "https"):
            continue
        if is_backend_link(href, backends):
            continue
        links.append(href)
    return links
