"""
site_press.cache: in-process artifact cache with TTL expiry and periodic sweep.

One :class:`ArtifactCaches` is built at start-up and handed to the request
handlers. Every namespace expires entries lazily on read; the sweeper task
drops everything at a fixed interval regardless of entry age.
"""
from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Optional, TypeVar

from site_press.logger import logger

__all__ = ["CacheEntry", "ResultCache", "ArtifactCaches"]

T = TypeVar("T")

Clock = Callable[[], float]


@dataclass(slots=True, frozen=True)
class CacheEntry(Generic[T]):
    fingerprint: str
    data: T
    timestamp: float


class ResultCache(Generic[T]):
    """Fingerprint → value map whose entries live ``ttl`` seconds."""

    def __init__(self, name: str, ttl: float, clock: Clock = time.monotonic) -> None:
        if ttl <= 0:
            raise ValueError("ttl must be > 0")
        self.name = name
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[str, CacheEntry[T]] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, fingerprint: object) -> bool:
        return fingerprint in self._entries

    def get(self, fingerprint: str) -> Optional[T]:
        """Return the live value or None; an expired entry is removed."""
        entry = self._entries.get(fingerprint)
        if entry is None:
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            self._entries.pop(fingerprint, None)
            logger.debug("Cache[%s]: expired %s", self.name, fingerprint)
            return None
        logger.info("Cache[%s]: hit %s", self.name, fingerprint)
        return entry.data

    def put(self, fingerprint: str, data: T) -> CacheEntry[T]:
        entry = CacheEntry(fingerprint=fingerprint, data=data, timestamp=self._clock())
        self._entries[fingerprint] = entry
        return entry

    def clear(self) -> None:
        self._entries.clear()


class ArtifactCaches:
    """The three namespaces of the service: PDF, Markdown and traversal URL lists."""

    def __init__(self, ttl: float, sweep_interval: float, clock: Clock = time.monotonic) -> None:
        if sweep_interval <= 0:
            raise ValueError("sweep_interval must be > 0")
        self.sweep_interval = sweep_interval
        self.pdf: ResultCache[Any] = ResultCache("pdf", ttl, clock)
        self.markdown: ResultCache[Any] = ResultCache("markdown", ttl, clock)
        self.traverse: ResultCache[Any] = ResultCache("traverse", ttl, clock)

    @classmethod
    def from_config(cls, config, clock: Clock = time.monotonic) -> "ArtifactCaches":
        return cls(config.cache_ttl, config.cache_sweep_interval, clock)

    def sweep(self) -> int:
        """Drop every entry of every namespace; return how many were dropped."""
        dropped = len(self.pdf) + len(self.markdown) + len(self.traverse)
        self.pdf.clear()
        self.markdown.clear()
        self.traverse.clear()
        logger.info("Cache sweep: %d entries dropped", dropped)
        return dropped

    async def run_sweeper(self) -> None:
        """Sweep forever every ``sweep_interval`` seconds; stop by cancelling."""
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.sweep()
