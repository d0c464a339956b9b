"""Site scraper: breadth-first crawl loop and run finalization."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from .config import DEFAULT_MAX_DEPTH, ScraperConfig
from .document import PageDocument, RunMetadata
from .frontier import Frontier
from .output import OutputLayout
from .pipeline import PagePipeline
from .renderer import PlaywrightRenderer, Renderer
from .urls import normalize_url, with_proxy

LOGGER = logging.getLogger(__name__)


@dataclass
class ScrapeResult:
    """Result of a site scrape."""

    documents: List[PageDocument] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)
    metadata: Optional[RunMetadata] = None
    output_dir: Optional[Path] = None
    index_path: Optional[Path] = None


async def scrape_site_async(
    url: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    config: Optional[ScraperConfig] = None,
    renderer: Optional[Renderer] = None,
) -> ScrapeResult:
    """
    Scrape a website breadth-first from a seed URL into Markdown files.

    Args:
        url: The seed URL. Its fragment is dropped.
        max_depth: Maximum link depth (0 = seed page only).
        config: Output directory, timeouts and browser settings.
        renderer: Rendering engine; Playwright Chromium by default.

    Returns:
        ScrapeResult with the written documents, per-page errors and the
        finalized run metadata.

    Raises:
        Exception: Engine launch and output failures propagate; per-page
            failures never do.
    """
    config = config or ScraperConfig()
    renderer = renderer or PlaywrightRenderer(
        headless=config.headless, user_agent=config.user_agent
    )
    seed = normalize_url(with_proxy(url, config.proxy_url))

    layout = OutputLayout(config.output_dir)
    layout.prepare()

    run = RunMetadata(start_url=seed, max_depth=max_depth)
    frontier = Frontier(seed)
    result = ScrapeResult(metadata=run, output_dir=layout.root)

    LOGGER.info("Starting scrape: %s (max_depth=%d)", seed, max_depth)

    engine = await renderer.launch()
    try:
        pipeline = PagePipeline(
            engine,
            frontier=frontier,
            layout=layout,
            run=run,
            config=config,
            max_depth=max_depth,
            errors=result.errors,
        )
        while frontier:
            entry = frontier.pop()
            if frontier.is_visited(entry.url):
                continue
            if entry.depth > max_depth:
                continue

            frontier.mark_visited(entry.url)
            LOGGER.info("Processing [depth %d]: %s", entry.depth, entry.url)

            document = await pipeline.process(entry)
            if document is not None:
                result.documents.append(document)

        result.index_path = layout.write_index(frontier, run)
        run.finish()
        layout.write_metadata(run)
    finally:
        await engine.close()

    LOGGER.info(
        "Scrape complete: %d pages, %d markdown files, %.1fs",
        run.pages_scraped,
        run.markdown_files,
        run.duration or 0.0,
    )
    return result


def scrape_site(
    url: str,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
    config: Optional[ScraperConfig] = None,
    renderer: Optional[Renderer] = None,
) -> ScrapeResult:
    """Synchronous wrapper for scrape_site_async."""
    return asyncio.run(
        scrape_site_async(url, max_depth=max_depth, config=config, renderer=renderer)
    )
