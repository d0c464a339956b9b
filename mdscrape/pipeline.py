"""Per-page processing: render, convert, persist, and harvest links."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .config import ScraperConfig
from .document import PageDocument, RunMetadata, isoformat_utc, utc_now
from .dom import PageSnapshot, find_main_content
from .frontier import Frontier, FrontierEntry
from .markdown import element_to_markdown
from .output import OutputLayout
from .renderer import PAGE_SNAPSHOT_SCRIPT, Engine
from .urls import is_followable, is_same_domain, normalize_url, resolve_url

LOGGER = logging.getLogger(__name__)


def same_domain_links(hrefs: Iterable[str], page_url: str) -> List[str]:
    """Absolute, de-duplicated links from ``hrefs`` that stay on the page's host."""
    links: List[str] = []
    seen = set()
    for href in hrefs:
        if not is_followable(href) or not is_same_domain(href, page_url):
            continue
        link = resolve_url(href, page_url)
        if link in seen:
            continue
        seen.add(link)
        links.append(link)
    return links


class PagePipeline:
    """Processes frontier entries one at a time against a shared engine.

    Failures inside :meth:`process` stay local to the page: they are logged,
    appended to ``errors`` and the page is skipped.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        frontier: Frontier,
        layout: OutputLayout,
        run: RunMetadata,
        config: ScraperConfig,
        max_depth: int,
        errors: Optional[List[Dict[str, str]]] = None,
    ) -> None:
        self.engine = engine
        self.frontier = frontier
        self.layout = layout
        self.run = run
        self.config = config
        self.max_depth = max_depth
        self.errors: List[Dict[str, str]] = errors if errors is not None else []

    async def process(self, entry: FrontierEntry) -> Optional[PageDocument]:
        """Render and store one page; return its document, or None on failure."""
        normalized = normalize_url(entry.url)
        page = await self.engine.new_page()
        stage = "navigate"
        try:
            await page.goto(
                entry.url,
                timeout_ms=self.config.timeout_ms,
                wait_until=self.config.wait_until,
            )

            stage = "extract"
            snapshot = PageSnapshot.from_dict(await page.evaluate(PAGE_SNAPSHOT_SCRIPT))
            root = find_main_content(snapshot.tree, self.config.main_selectors)
            markdown = element_to_markdown(root, entry.url)

            stage = "write"
            document = PageDocument(
                url=entry.url,
                normalized_url=normalized,
                depth=entry.depth,
                markdown=markdown,
                metadata=snapshot.metadata,
                generated_at=isoformat_utc(utc_now()),
            )
            path = self.layout.write_page(document)
            self.run.record_page()
            LOGGER.info("Saved markdown: %s", path)

            stage = "screenshot"
            await page.screenshot(
                str(self.layout.screenshot_path(document.filename)), full_page=True
            )

            if entry.depth < self.max_depth:
                stage = "links"
                queued = self._enqueue_links(snapshot.links, entry)
                LOGGER.debug("Queued %d links from %s", queued, entry.url)

            return document
        except Exception as exc:
            LOGGER.warning("Failed to process %s (%s): %s", entry.url, stage, exc)
            self.errors.append({"url": entry.url, "error": str(exc), "stage": stage})
            return None
        finally:
            await page.close()

    def _enqueue_links(self, hrefs: Iterable[str], entry: FrontierEntry) -> int:
        queued = 0
        for link in same_domain_links(hrefs, entry.url):
            if self.frontier.is_visited(link):
                continue
            self.frontier.push(link, entry.depth + 1)
            queued += 1
        return queued
