"""
Breadth-first crawl frontier: FIFO queue plus visited-set bookkeeping.

The frontier never hands out more URLs than the page budget allows, so a
crawl terminates in at most ``max_pages`` dequeues however many links the
visited pages expose.
"""
from __future__ import annotations

import enum
from collections import deque
from typing import Deque, Iterable, List, Optional, Set

from site_press.crawler.link_filter import is_eligible, origin_of, url_key
from site_press.logger import logger

__all__ = ("Frontier", "FrontierState")


class FrontierState(enum.Enum):
    EMPTY = "empty"
    EXPANDING = "expanding"
    EXHAUSTED = "exhausted"


class Frontier:
    """Work queue of one crawl run."""

    def __init__(self, max_pages: int, traverse_links: bool) -> None:
        if max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        self.max_pages = max_pages
        self.traverse_links = traverse_links
        self.base_origin: Optional[str] = None
        self.state = FrontierState.EMPTY
        self._queue: Deque[str] = deque()
        self._seen: Set[str] = set()
        self._visited: Set[str] = set()

    def start(self, seed_url: str) -> None:
        """Queue the seed URL; its origin becomes the crawl origin."""
        if self.state is not FrontierState.EMPTY:
            raise RuntimeError("frontier already started")
        origin = origin_of(seed_url)
        if origin is None:
            raise ValueError(f"seed URL is not an absolute http(s) URL: {seed_url!r}")
        self.base_origin = origin
        self._enqueue(seed_url)
        self.state = FrontierState.EXPANDING

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    @property
    def pending(self) -> int:
        return len(self._queue)

    def is_visited(self, url: str) -> bool:
        return url_key(url) in self._visited

    def next(self) -> Optional[str]:
        """Dequeue the head of the queue, or None once exhausted."""
        return self._pop(reserved=0)

    def next_batch(self, size: int) -> List[str]:
        """
        Dequeue up to *size* URLs at once.

        Slots already taken by the batch count against the page budget, so
        visiting the whole batch never overruns ``max_pages``.
        """
        batch: List[str] = []
        while len(batch) < size:
            url = self._pop(reserved=len(batch))
            if url is None:
                break
            batch.append(url)
        return batch

    def record_visit(self, url: str) -> bool:
        """Mark *url* visited. False means it was already visited and must be skipped."""
        key = url_key(url)
        if key in self._visited:
            return False
        self._visited.add(key)
        return True

    def offer_discovered(self, urls: Iterable[str]) -> int:
        """Append eligible, unseen URLs to the tail in discovery order; return how many."""
        if not self.traverse_links or self.state is not FrontierState.EXPANDING:
            return 0
        assert self.base_origin is not None
        added = 0
        for url in urls:
            if not is_eligible(url, self.base_origin):
                continue
            url = url.strip()
            if url.startswith("/") and not url.startswith("//"):
                url = self.base_origin + url
            if self._enqueue(url):
                added += 1
        if added:
            logger.debug("Frontier: +%d URLs (%d pending)", added, len(self._queue))
        return added

    def _enqueue(self, url: str) -> bool:
        key = url_key(url)
        if key in self._visited or key in self._seen:
            return False
        self._queue.append(url)
        self._seen.add(key)
        return True

    def _pop(self, reserved: int) -> Optional[str]:
        if self.state is FrontierState.EXHAUSTED:
            return None
        while self._queue:
            if len(self._visited) + reserved >= self.max_pages:
                break
            url = self._queue.popleft()
            key = url_key(url)
            if key in self._visited:
                continue
            return url
        if reserved == 0:
            self.state = FrontierState.EXHAUSTED
        return None
