"""Website-to-Markdown scraper.

Crawls a site breadth-first from a seed URL, following same-domain links up
to a maximum depth, and writes each rendered page as a Markdown document
with a front-matter header plus a full-page screenshot. A run produces:

- ``markdown/<page>.md`` for every page
- ``<page>.png`` screenshots
- ``markdown/index.md`` linking every visited page
- ``metadata.json`` with counters and timing

Example usage:

    from mdscrape import ScraperConfig, scrape_site_async

    result = await scrape_site_async(
        "https://docs.example.com",
        max_depth=2,
        config=ScraperConfig(output_dir="docs_dump"),
    )
    for doc in result.documents:
        print(doc.filename, doc.metadata.title)

    # Convert a tree without a browser
    from mdscrape import element_to_markdown, parse_html

    print(element_to_markdown(parse_html(html), "https://example.com/page"))
"""

from __future__ import annotations

from .config import ConfigOverrides, ScraperConfig, build_config
from .document import PageDocument, PageMetadata, RunMetadata
from .dom import Element, PageSnapshot, TextNode, parse_html
from .frontier import Frontier, FrontierEntry
from .markdown import MarkdownConverter, clean_text, element_to_markdown
from .renderer import PlaywrightRenderer, RenderError, Renderer, ScraperError
from .site import ScrapeResult, scrape_site, scrape_site_async
from .urls import normalize_url, url_to_filename

__all__ = [
    # Documents
    "PageDocument",
    "PageMetadata",
    "RunMetadata",
    "ScrapeResult",
    # Tree and conversion
    "Element",
    "TextNode",
    "PageSnapshot",
    "parse_html",
    "MarkdownConverter",
    "clean_text",
    "element_to_markdown",
    # Crawl
    "Frontier",
    "FrontierEntry",
    "normalize_url",
    "url_to_filename",
    "scrape_site",
    "scrape_site_async",
    # Rendering
    "Renderer",
    "PlaywrightRenderer",
    "ScraperError",
    "RenderError",
    # Config
    "ScraperConfig",
    "ConfigOverrides",
    "build_config",
]
