"""Shared fixtures: an in-memory renderer serving fixed HTML pages."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pytest

from mdscrape.config import ScraperConfig
from mdscrape.dom import snapshot_from_html
from mdscrape.renderer import RenderError


class FakePage:
    def __init__(self, engine: "FakeEngine") -> None:
        self.engine = engine
        self.url: Optional[str] = None
        self.closed = False

    async def goto(self, url: str, *, timeout_ms: float, wait_until: str) -> None:
        self.engine.navigations.append(url)
        self.engine.goto_options.append({"timeout_ms": timeout_ms, "wait_until": wait_until})
        page = self.engine.pages.get(url)
        if page is None or isinstance(page, Exception):
            raise page if isinstance(page, Exception) else RenderError(f"404 {url}")
        self.url = url

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        assert self.url is not None
        return snapshot_from_html(self.engine.pages[self.url], self.url)

    async def screenshot(self, path: str, *, full_page: bool = True) -> None:
        if self.engine.screenshot_error is not None:
            raise self.engine.screenshot_error
        Path(path).write_bytes(b"\x89PNG fake")
        self.engine.screenshots.append(path)

    async def close(self) -> None:
        self.closed = True
        self.engine.closed_pages += 1


class FakeEngine:
    def __init__(self, pages: Dict[str, Union[str, Exception]]) -> None:
        self.pages = pages
        self.navigations: List[str] = []
        self.goto_options: List[Dict[str, Any]] = []
        self.screenshots: List[str] = []
        self.opened_pages = 0
        self.closed_pages = 0
        self.closed = 0
        self.screenshot_error: Optional[Exception] = None

    async def new_page(self) -> FakePage:
        self.opened_pages += 1
        return FakePage(self)

    async def close(self) -> None:
        self.closed += 1


class FakeRenderer:
    """Serves ``pages`` (URL -> HTML, or an exception to raise on navigation)."""

    def __init__(self, pages: Dict[str, Union[str, Exception]]) -> None:
        self.engine = FakeEngine(pages)
        self.launches = 0

    async def launch(self) -> FakeEngine:
        self.launches += 1
        return self.engine


@pytest.fixture
def fake_renderer():
    return FakeRenderer


@pytest.fixture
def config(tmp_path: Path) -> ScraperConfig:
    return ScraperConfig(output_dir=str(tmp_path / "out"))


def html_page(body: str, *, title: str = "Page", head: str = "") -> str:
    return (
        f"<html><head><title>{title}</title>{head}</head>"
        f"<body>{body}</body></html>"
    )


@pytest.fixture
def make_html():
    return html_page
