"""site_press.engine: orchestration of cache lookup, crawl, merge and cache store."""

from __future__ import annotations

import json
from typing import List, Optional

from site_press.aggregator import merge
from site_press.cache import ArtifactCaches, ResultCache
from site_press.config import ServiceConfig
from site_press.crawler.browser import PlaywrightRenderer, Renderer, open_session
from site_press.crawler.models import CrawlRequest, MergedArtifact, OutputMode, PageVisitResult
from site_press.crawler.scheduler import BatchScheduler
from site_press.crawler.visitor import PageVisitor
from site_press.logger import logger
from site_press.markdown import MarkdownConverter

__all__ = ["ConversionService", "fingerprint"]


def fingerprint(request: CrawlRequest, include_password: bool = False) -> str:
    """Deterministic cache key of a request."""
    key = {
        "url": request.url,
        "username": request.username,
        "traverseLinks": request.traverse_links,
        "maxPages": request.max_pages,
    }
    if include_password:
        key["password"] = request.password
    return json.dumps(key)


class ConversionService:
    """Facade used by the HTTP handlers and the CLI."""

    def __init__(
        self,
        config: ServiceConfig,
        renderer: Optional[Renderer] = None,
        caches: Optional[ArtifactCaches] = None,
        converter: Optional[MarkdownConverter] = None,
    ) -> None:
        self.config = config
        self.renderer = renderer or PlaywrightRenderer(config)
        self.caches = caches or ArtifactCaches.from_config(config)
        self.scheduler = BatchScheduler(PageVisitor(converter), batch_size=config.batch_size)

    def fingerprint(self, request: CrawlRequest) -> str:
        return fingerprint(request, self.config.fingerprint_includes_password)

    def _cache_for(self, mode: OutputMode) -> ResultCache:
        return self.caches.pdf if mode is OutputMode.PDF else self.caches.markdown

    async def _crawl(self, request: CrawlRequest, mode: Optional[OutputMode]) -> List[PageVisitResult]:
        async with open_session(self.renderer) as session:
            return await self.scheduler.run(session, request, mode)

    async def convert(self, request: CrawlRequest, mode: OutputMode) -> MergedArtifact:
        """Return the merged artifact of *request*, from cache when still fresh."""
        key = self.fingerprint(request)
        cache = self._cache_for(mode)
        cached = cache.get(key)
        if cached is not None:
            logger.info("Using cached %s for %s", mode.value, request.url)
            return cached

        results = await self._crawl(request, mode)
        artifact = merge(results, mode)
        if artifact.pages:
            cache.put(key, artifact)
            # traverse() keys its entries on traverse_links=True only
            if request.traverse_links:
                self.caches.traverse.put(key, tuple(artifact.urls))
        return artifact

    async def traverse(self, request: CrawlRequest) -> List[str]:
        """Return the URLs a crawl of *request* visits, always following links."""
        request = request.model_copy(update={"traverse_links": True})
        key = self.fingerprint(request)
        cached = self.caches.traverse.get(key)
        if cached is not None:
            logger.info("Using cached URL list for %s", request.url)
            return list(cached)

        results = await self._crawl(request, None)
        urls = [r.url for r in results]
        if urls:
            self.caches.traverse.put(key, tuple(urls))
        return urls
