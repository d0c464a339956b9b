"""Tests for mdscrape.site module."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from mdscrape.config import ScraperConfig
from mdscrape.site import ScrapeResult, scrape_site, scrape_site_async

ROOT = "https://example.com/"


def _links(*paths):
    return "".join(f"<a href='{path}'>{path}</a>" for path in paths)


@pytest.fixture
def site(make_html):
    """A small site: root -> a, b; a -> c, external; b -> a#frag, root."""
    return {
        ROOT: make_html("<main><h1>Root</h1></main>" + _links("/a", "/b"), title="Root"),
        "https://example.com/a": make_html(
            "<h1>A</h1>" + _links("/c", "https://other.org/x", "mailto:x@example.com")
        ),
        "https://example.com/b": make_html("<h1>B</h1>" + _links("/a#frag", "/")),
        "https://example.com/c": make_html("<h1>C</h1>" + _links("/d")),
        "https://example.com/d": make_html("<h1>D</h1>"),
    }


class TestScrapeResult:
    def test_defaults(self):
        result = ScrapeResult()
        assert result.documents == []
        assert result.errors == []
        assert result.metadata is None


class TestScrapeSiteAsync:
    @pytest.mark.asyncio
    async def test_breadth_first_order(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        await scrape_site_async(ROOT, max_depth=2, config=config, renderer=renderer)
        assert renderer.engine.navigations == [
            ROOT,
            "https://example.com/a",
            "https://example.com/b",
            "https://example.com/c",
        ]

    @pytest.mark.asyncio
    async def test_each_page_processed_once(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = await scrape_site_async(ROOT, max_depth=5, config=config, renderer=renderer)
        assert len(renderer.engine.navigations) == len(set(renderer.engine.navigations))
        assert len(result.documents) == 5
        assert result.metadata.pages_scraped == 5

    @pytest.mark.asyncio
    async def test_depth_boundary(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = await scrape_site_async(ROOT, max_depth=1, config=config, renderer=renderer)
        assert {doc.depth for doc in result.documents} == {0, 1}
        assert "https://example.com/c" not in renderer.engine.navigations

    @pytest.mark.asyncio
    async def test_max_depth_zero_single_page(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = await scrape_site_async(
            "https://example.com", max_depth=0, config=config, renderer=renderer
        )

        assert len(result.documents) == 1
        assert result.metadata.pages_scraped == 1
        assert renderer.engine.navigations == [ROOT]

        index = result.index_path.read_text(encoding="utf-8")
        entries = [line for line in index.splitlines() if line.startswith("- [")]
        assert entries == [f"- [{ROOT}](./index.md)"]

    @pytest.mark.asyncio
    async def test_always_failing_navigation(self, fake_renderer, config):
        renderer = fake_renderer({})
        result = await scrape_site_async(ROOT, max_depth=2, config=config, renderer=renderer)

        assert result.documents == []
        assert result.metadata.pages_scraped == 0
        assert result.metadata.markdown_files == 0
        assert len(result.errors) == 1
        assert result.index_path.exists()
        metadata = json.loads((result.output_dir / "metadata.json").read_text())
        assert metadata["pagesScraped"] == 0
        assert metadata["markdownFiles"] == 0
        assert renderer.engine.closed == 1

    @pytest.mark.asyncio
    async def test_failed_page_does_not_stop_crawl(self, fake_renderer, config, site):
        site["https://example.com/a"] = RuntimeError("boom")
        renderer = fake_renderer(site)
        result = await scrape_site_async(ROOT, max_depth=2, config=config, renderer=renderer)

        assert [e["url"] for e in result.errors] == ["https://example.com/a"]
        assert "https://example.com/b" in renderer.engine.navigations
        assert result.metadata.pages_scraped == 2

    @pytest.mark.asyncio
    async def test_output_bundle(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = await scrape_site_async(ROOT, max_depth=1, config=config, renderer=renderer)

        root = result.output_dir
        assert (root / "markdown" / "a.md").exists()
        assert (root / "markdown" / "b.md").exists()
        assert (root / "a.png").exists()
        assert (root / "markdown" / "images").is_dir()
        metadata = json.loads((root / "metadata.json").read_text())
        assert metadata["startUrl"] == ROOT
        assert metadata["maxDepth"] == 1
        assert metadata["pagesScraped"] == 3
        assert metadata["markdownFiles"] == 3
        assert metadata["duration"] >= 0

    @pytest.mark.asyncio
    async def test_fragment_keeps_first_original(self, fake_renderer, config, make_html):
        renderer = fake_renderer(
            {
                ROOT: make_html(_links("/a#one", "/a#two")),
                "https://example.com/a#one": make_html("<p>A</p>"),
            }
        )
        result = await scrape_site_async(ROOT, max_depth=1, config=config, renderer=renderer)

        assert renderer.engine.navigations == [ROOT, "https://example.com/a#one"]
        assert result.documents[1].url == "https://example.com/a#one"
        assert result.documents[1].normalized_url == "https://example.com/a"
        index = result.index_path.read_text(encoding="utf-8")
        assert "- [https://example.com/a#one](./a.md)" in index

    @pytest.mark.asyncio
    async def test_seed_fragment_dropped(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = await scrape_site_async(
            "https://example.com/#intro", max_depth=0, config=config, renderer=renderer
        )
        assert result.metadata.start_url == ROOT

    @pytest.mark.asyncio
    async def test_proxy_prefix(self, fake_renderer, tmp_path, make_html):
        proxied = "https://proxy.test/?https://example.com"
        renderer = fake_renderer({f"{proxied}": make_html("<p>x</p>")})
        config = ScraperConfig(output_dir=str(tmp_path), proxy_url="https://proxy.test/?")
        result = await scrape_site_async(
            "https://example.com", max_depth=0, config=config, renderer=renderer
        )
        assert renderer.engine.navigations == [proxied]
        assert result.metadata.pages_scraped == 1

    @pytest.mark.asyncio
    async def test_engine_closed_on_fatal_error(self, config):
        engine = MagicMock()
        engine.new_page = AsyncMock(side_effect=RuntimeError("browser crashed"))
        engine.close = AsyncMock()
        renderer = MagicMock()
        renderer.launch = AsyncMock(return_value=engine)

        with pytest.raises(RuntimeError, match="browser crashed"):
            await scrape_site_async(ROOT, max_depth=1, config=config, renderer=renderer)

        engine.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_launch_failure_propagates(self, config):
        renderer = MagicMock()
        renderer.launch = AsyncMock(side_effect=RuntimeError("no chromium"))

        with pytest.raises(RuntimeError, match="no chromium"):
            await scrape_site_async(ROOT, config=config, renderer=renderer)

    @pytest.mark.asyncio
    async def test_default_renderer_is_playwright(self, config):
        with patch("mdscrape.site.PlaywrightRenderer") as MockRenderer:
            engine = MagicMock()
            engine.new_page = AsyncMock(side_effect=RuntimeError("stop"))
            engine.close = AsyncMock()
            MockRenderer.return_value.launch = AsyncMock(return_value=engine)

            with pytest.raises(RuntimeError):
                await scrape_site_async(ROOT, config=config)

            MockRenderer.assert_called_once_with(
                headless=True, user_agent=config.user_agent
            )


class TestScrapeSiteSync:
    def test_sync_wrapper(self, fake_renderer, config, site):
        renderer = fake_renderer(site)
        result = scrape_site(ROOT, max_depth=0, config=config, renderer=renderer)
        assert result.metadata.pages_scraped == 1
