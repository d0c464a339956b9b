"""Data structures for scraped pages and run metadata."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .urls import url_to_filename


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(moment: datetime) -> str:
    """ISO-8601 timestamp in UTC with millisecond precision and a ``Z`` suffix."""
    return (
        moment.astimezone(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


@dataclass(slots=True)
class PageMetadata:
    """Title, description and canonical address read from a rendered page."""

    title: str = ""
    description: str = ""
    canonical: str = ""


@dataclass(slots=True)
class PageDocument:
    """A converted page: Markdown body plus its front matter."""

    url: str
    normalized_url: str
    depth: int
    markdown: str
    metadata: PageMetadata = field(default_factory=PageMetadata)
    generated_at: str = ""

    @property
    def filename(self) -> str:
        return url_to_filename(self.normalized_url)

    def front_matter(self) -> str:
        lines = [
            "---",
            f"title: {_quote(self.metadata.title)}",
            f"url: {_quote(self.url)}",
            f"normalizedUrl: {_quote(self.normalized_url)}",
            f"description: {_quote(self.metadata.description)}",
            f"date: {_quote(self.generated_at)}",
            f"depth: {self.depth}",
            "---",
        ]
        return "\n".join(lines) + "\n\n"

    def render(self) -> str:
        return self.front_matter() + self.markdown


@dataclass
class RunMetadata:
    """Run-wide counters and timestamps, persisted as ``metadata.json``.

    One instance is created per run and threaded through the page pipeline,
    which calls :meth:`record_page` for every page written. :meth:`finish`
    stamps the end time and duration.
    """

    start_url: str
    max_depth: int
    started_at: datetime = field(default_factory=utc_now)
    pages_scraped: int = 0
    markdown_files: int = 0
    finished_at: Optional[datetime] = None

    @property
    def start_time(self) -> str:
        return isoformat_utc(self.started_at)

    @property
    def end_time(self) -> Optional[str]:
        if self.finished_at is None:
            return None
        return isoformat_utc(self.finished_at)

    @property
    def duration(self) -> Optional[float]:
        """Elapsed seconds between start and finish."""
        if self.finished_at is None:
            return None
        return (self.finished_at - self.started_at).total_seconds()

    def record_page(self) -> None:
        self.markdown_files += 1
        self.pages_scraped += 1

    def finish(self, now: Optional[datetime] = None) -> None:
        self.finished_at = now or utc_now()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "startUrl": self.start_url,
            "startTime": self.start_time,
            "maxDepth": self.max_depth,
            "pagesScraped": self.pages_scraped,
            "markdownFiles": self.markdown_files,
        }
        if self.finished_at is not None:
            data["endTime"] = self.end_time
            data["duration"] = self.duration
        return data
