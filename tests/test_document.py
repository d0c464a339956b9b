"""Tests for mdscrape.document module."""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

from mdscrape.document import (
    PageDocument,
    PageMetadata,
    RunMetadata,
    isoformat_utc,
)


class TestIsoformatUtc:
    def test_millisecond_z_suffix(self):
        moment = datetime(2024, 5, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
        assert isoformat_utc(moment) == "2024-05-01T12:30:45.123Z"

    def test_converts_offset(self):
        moment = datetime(2024, 5, 1, 14, 0, tzinfo=timezone(timedelta(hours=2)))
        assert isoformat_utc(moment) == "2024-05-01T12:00:00.000Z"


class TestPageDocument:
    def _doc(self, **kwargs):
        defaults = dict(
            url="https://x.com/docs#top",
            normalized_url="https://x.com/docs",
            depth=1,
            markdown="# Docs\n\n",
            metadata=PageMetadata(title='Say "hi"', description="About"),
            generated_at="2024-05-01T12:00:00.000Z",
        )
        defaults.update(kwargs)
        return PageDocument(**defaults)

    def test_filename(self):
        assert self._doc().filename == "docs.md"

    def test_front_matter_order(self):
        lines = self._doc().front_matter().rstrip("\n").splitlines()
        keys = [line.split(":", 1)[0] for line in lines[1:-1]]
        assert keys == ["title", "url", "normalizedUrl", "description", "date", "depth"]
        assert lines[0] == lines[-1] == "---"

    def test_front_matter_values(self):
        fm = self._doc().front_matter()
        assert 'title: "Say \\"hi\\""' in fm
        assert 'url: "https://x.com/docs#top"' in fm
        assert 'normalizedUrl: "https://x.com/docs"' in fm
        assert "depth: 1\n" in fm

    def test_render_blank_line_before_body(self):
        assert self._doc().render().endswith("---\n\n# Docs\n\n")

    def test_default_metadata(self):
        doc = PageDocument(url="u", normalized_url="u", depth=0, markdown="")
        assert doc.metadata == PageMetadata()


class TestRunMetadata:
    def _run(self):
        start = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        return RunMetadata(start_url="https://x.com/", max_depth=2, started_at=start)

    def test_record_page(self):
        run = self._run()
        run.record_page()
        run.record_page()
        assert run.pages_scraped == 2
        assert run.markdown_files == 2

    def test_unfinished(self):
        run = self._run()
        assert run.end_time is None
        assert run.duration is None
        assert "endTime" not in run.to_dict()

    def test_finish_and_serialize(self):
        run = self._run()
        run.finish(run.started_at + timedelta(seconds=1.5))
        data = run.to_dict()
        assert list(data) == [
            "startUrl",
            "startTime",
            "maxDepth",
            "pagesScraped",
            "markdownFiles",
            "endTime",
            "duration",
        ]
        assert data["startTime"] == "2024-05-01T12:00:00.000Z"
        assert data["endTime"] == "2024-05-01T12:00:01.500Z"
        assert data["duration"] == 1.5
        json.dumps(data)
