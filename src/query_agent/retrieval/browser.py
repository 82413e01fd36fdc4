"""
Headless browser sessions driven by Playwright.

A session is one browser with one context and one page. Sessions are opened
through an async context manager that always closes the browser, whatever
happens while it is in use.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import AsyncIterator, Callable, Protocol

from playwright.async_api import Page, async_playwright

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)
DEFAULT_VIEWPORT = {"width": 1920, "height": 1080}
LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-blink-features=AutomationControlled",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
]

LINKS_SCRIPT = """
([selector, limit]) => Array.from(document.querySelectorAll(selector))
    .slice(0, limit)
    .map(a => a.href || '')
"""

PAGE_TEXT_SCRIPT = """
({removeSelectors, contentSelectors, minChars}) => {
    if (removeSelectors.length) {
        document.querySelectorAll(removeSelectors.join(', ')).forEach(el => el.remove());
    }
    for (const selector of contentSelectors) {
        const element = document.querySelector(selector);
        if (element && element.innerText.trim().length > minChars) {
            return element.innerText.trim();
        }
    }
    return document.body ? document.body.innerText.trim() : '';
}
"""


class BrowserSession(Protocol):
    """The browser operations the retriever relies on."""

    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None: ...

    async def settle(self, delay_ms: float) -> None: ...

    async def wait_for_selector(self, selector: str, *, timeout_ms: float) -> None: ...

    async def link_hrefs(self, selector: str, limit: int) -> list[str]: ...

    async def page_text(
        self,
        *,
        remove_selectors: tuple[str, ...],
        content_selectors: tuple[str, ...],
        min_chars: int,
    ) -> str: ...


BrowserFactory = Callable[[], AbstractAsyncContextManager[BrowserSession]]


class PlaywrightSession:
    """BrowserSession backed by a single Playwright page."""

    def __init__(self, page: Page) -> None:
        self._page = page

    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None:
        await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)

    async def settle(self, delay_ms: float) -> None:
        await self._page.wait_for_timeout(delay_ms)

    async def wait_for_selector(self, selector: str, *, timeout_ms: float) -> None:
        await self._page.wait_for_selector(selector, timeout=timeout_ms)

    async def link_hrefs(self, selector: str, limit: int) -> list[str]:
        hrefs = await self._page.evaluate(LINKS_SCRIPT, [selector, limit])
        return [str(href) for href in hrefs or [] if href]

    async def page_text(
        self,
        *,
        remove_selectors: tuple[str, ...],
        content_selectors: tuple[str, ...],
        min_chars: int,
    ) -> str:
        text = await self._page.evaluate(
            PAGE_TEXT_SCRIPT,
            {
                "removeSelectors": list(remove_selectors),
                "contentSelectors": list(content_selectors),
                "minChars": min_chars,
            },
        )
        return str(text or "")


def playwright_factory(
    *,
    headless: bool = True,
    user_agent: str = DEFAULT_USER_AGENT,
) -> BrowserFactory:
    """Return a factory that launches a fresh Chromium session per call."""

    @asynccontextmanager
    async def open_session() -> AsyncIterator[BrowserSession]:
        async with async_playwright() as pw:
            browser = await pw.chromium.launch(headless=headless, args=LAUNCH_ARGS)
            try:
                context = await browser.new_context(
                    user_agent=user_agent, viewport=DEFAULT_VIEWPORT
                )
                page = await context.new_page()
                yield PlaywrightSession(page)
            finally:
                await browser.close()

    return open_session
