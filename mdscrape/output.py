"""On-disk layout of a scrape run: page documents, index and metadata."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Union

from .document import PageDocument, RunMetadata
from .frontier import Frontier
from .urls import screenshot_filename, url_to_filename

LOGGER = logging.getLogger(__name__)

MARKDOWN_DIR = "markdown"
IMAGES_DIR = "images"
INDEX_FILENAME = "index.md"
METADATA_FILENAME = "metadata.json"


class OutputLayout:
    """Paths under a run's root directory.

    ``<root>/markdown/<name>.md`` per page, ``<root>/<name>.png`` per
    screenshot, ``<root>/markdown/index.md`` and ``<root>/metadata.json``.
    ``markdown/images`` is created but not written to.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    @property
    def markdown_dir(self) -> Path:
        return self.root / MARKDOWN_DIR

    @property
    def images_dir(self) -> Path:
        return self.markdown_dir / IMAGES_DIR

    @property
    def index_path(self) -> Path:
        return self.markdown_dir / INDEX_FILENAME

    @property
    def metadata_path(self) -> Path:
        return self.root / METADATA_FILENAME

    def prepare(self) -> None:
        self.images_dir.mkdir(parents=True, exist_ok=True)

    def page_path(self, filename: str) -> Path:
        return self.markdown_dir / filename

    def screenshot_path(self, filename: str) -> Path:
        return self.root / screenshot_filename(filename)

    def write_page(self, document: PageDocument) -> Path:
        path = self.page_path(document.filename)
        path.write_text(document.render(), encoding="utf-8")
        return path

    def write_index(self, frontier: Frontier, run: RunMetadata) -> Path:
        path = self.index_path
        path.write_text(build_index_markdown(frontier, run), encoding="utf-8")
        LOGGER.info("Wrote index %s", path)
        return path

    def write_metadata(self, run: RunMetadata) -> Path:
        path = self.metadata_path
        path.write_text(
            json.dumps(run.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8"
        )
        LOGGER.info("Wrote metadata %s", path)
        return path


def build_index_markdown(frontier: Frontier, run: RunMetadata) -> str:
    """Index document listing every visited page, sorted by normalized URL."""
    lines = [
        "# Scrape Index",
        "",
        "## Run",
        "",
        f"- **Start URL**: [{run.start_url}]({run.start_url})",
        f"- **Start time**: {run.start_time}",
        f"- **Max depth**: {run.max_depth}",
        f"- **Pages scraped**: {run.pages_scraped}",
        f"- **Markdown files**: {run.markdown_files}",
        "",
        "## Pages",
        "",
    ]
    for normalized in frontier.visited_urls():
        original = frontier.original_url(normalized)
        lines.append(f"- [{original}](./{url_to_filename(normalized)})")
    return "\n".join(lines) + "\n"
