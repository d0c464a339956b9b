"""Breadth-first crawl frontier with fragment-insensitive deduplication."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, List, Set

from .urls import normalize_url


@dataclass(frozen=True)
class FrontierEntry:
    """A pending address and the link depth it was discovered at."""

    url: str
    depth: int


class Frontier:
    """FIFO work queue plus the set of claimed (normalized) addresses.

    Callers go through ``push``/``pop``/``is_visited``/``mark_visited``;
    the containers themselves stay private. The first original form seen for
    a normalized address is kept for display.
    """

    def __init__(self, seed: str) -> None:
        self._queue: Deque[FrontierEntry] = deque([FrontierEntry(seed, 0)])
        self._visited: Set[str] = set()
        self._originals: Dict[str, str] = {normalize_url(seed): seed}

    def __len__(self) -> int:
        return len(self._queue)

    def __bool__(self) -> bool:
        return bool(self._queue)

    def push(self, url: str, depth: int) -> None:
        self._queue.append(FrontierEntry(url, depth))

    def pop(self) -> FrontierEntry:
        return self._queue.popleft()

    def is_visited(self, url: str) -> bool:
        return normalize_url(url) in self._visited

    def mark_visited(self, url: str) -> str:
        """Claim ``url`` and return its normalized form."""
        normalized = normalize_url(url)
        self._visited.add(normalized)
        self._originals.setdefault(normalized, url)
        return normalized

    def original_url(self, normalized: str) -> str:
        return self._originals.get(normalized, normalized)

    def visited_urls(self) -> List[str]:
        return sorted(self._visited)
