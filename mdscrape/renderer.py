"""Rendering engine interface and its Playwright implementation.

The crawl core only talks to the small protocol below, so tests can swap
in a fake that serves fixed document trees. :class:`PlaywrightRenderer`
drives a headless Chromium: one browser per run, one context per page.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional, Protocol

from .config import BROWSER_ARGS, DEFAULT_USER_AGENT

LOGGER = logging.getLogger(__name__)


class ScraperError(RuntimeError):
    """Base class for scraper failures."""


class RenderError(ScraperError):
    """Raised when a page cannot be loaded in the browser."""


# Serializes the live document into the JSON shape read by
# ``dom.PageSnapshot.from_dict``.
PAGE_SNAPSHOT_SCRIPT = """
() => {
    const serialize = (node) => {
        if (node.nodeType === Node.TEXT_NODE) {
            return { type: 'text', text: node.textContent };
        }
        if (node.nodeType !== Node.ELEMENT_NODE) {
            return null;
        }
        const style = window.getComputedStyle(node);
        const attrs = {};
        for (const attr of Array.from(node.attributes)) {
            attrs[attr.name] = attr.value;
        }
        const children = [];
        for (const child of Array.from(node.childNodes)) {
            const serialized = serialize(child);
            if (serialized) children.push(serialized);
        }
        return {
            type: 'element',
            tag: node.tagName.toLowerCase(),
            attrs,
            hidden: style.display === 'none' || style.visibility === 'hidden',
            children,
        };
    };
    const root = document.body || document.documentElement;
    return {
        url: window.location.href,
        title: document.title,
        description: document.querySelector('meta[name="description"]')?.content || '',
        canonical: document.querySelector('link[rel="canonical"]')?.href || window.location.href,
        tree: root ? serialize(root) : null,
        links: Array.from(document.querySelectorAll('a[href]')).map(a => a.href),
    };
}
"""


class PageHandle(Protocol):
    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None:
        ...

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        ...

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        ...

    async def close(self) -> None:
        ...


class Engine(Protocol):
    async def new_page(self) -> PageHandle:
        ...

    async def close(self) -> None:
        ...


class Renderer(Protocol):
    async def launch(self) -> Engine:
        ...


class PlaywrightPage:
    """One browser context with a single page."""

    def __init__(self, context: Any, page: Any) -> None:
        self._context = context
        self._page = page

    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None:
        from playwright.async_api import Error as PlaywrightError

        try:
            await self._page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PlaywrightError as exc:
            raise RenderError(f"Navigation to {url} failed: {exc}") from exc

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        await self._page.screenshot(path=path, full_page=full_page)

    async def close(self) -> None:
        await self._context.close()


class PlaywrightEngine:
    """A launched Chromium instance shared by the whole run."""

    def __init__(self, playwright: Any, browser: Any, user_agent: str) -> None:
        self._playwright = playwright
        self._browser = browser
        self._user_agent = user_agent

    async def new_page(self) -> PlaywrightPage:
        context = await self._browser.new_context(user_agent=self._user_agent)
        try:
            page = await context.new_page()
        except Exception:
            await context.close()
            raise
        return PlaywrightPage(context, page)

    async def close(self) -> None:
        try:
            await self._browser.close()
        finally:
            await self._playwright.stop()
        LOGGER.debug("Browser closed")


class PlaywrightRenderer:
    """Launches headless Chromium through Playwright."""

    def __init__(
        self,
        *,
        headless: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        args: Optional[List[str]] = None,
    ) -> None:
        self.headless = headless
        self.user_agent = user_agent
        self.args = list(BROWSER_ARGS if args is None else args)

    async def launch(self) -> PlaywrightEngine:
        try:
            from playwright.async_api import async_playwright
        except ImportError as exc:
            raise RuntimeError(
                "Playwright is required for scraping. "
                "Install it with: pip install playwright && playwright install chromium"
            ) from exc

        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.headless,
                args=self.args,
            )
        except Exception:
            await playwright.stop()
            raise
        LOGGER.debug("Launched Chromium (headless=%s)", self.headless)
        return PlaywrightEngine(playwright, browser, self.user_agent)
