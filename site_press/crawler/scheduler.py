"""
Batch scheduler: runs the page visitor over the frontier in BFS order.

The first page is visited on its own since it carries the login. The rest
are drawn in batches and visited one after another on the same session;
links found on each page are offered to the frontier before the next page
is visited.
"""
from __future__ import annotations

import time
from typing import List, Optional

from site_press.crawler.browser import BrowserSession
from site_press.crawler.frontier import Frontier
from site_press.crawler.models import CrawlRequest, OutputMode, PageVisitResult
from site_press.crawler.visitor import PageVisitor
from site_press.logger import logger

__all__ = ("BatchScheduler", "DEFAULT_BATCH_SIZE")

DEFAULT_BATCH_SIZE = 5


class BatchScheduler:
    def __init__(self, visitor: Optional[PageVisitor] = None, batch_size: int = DEFAULT_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be >= 1")
        self.visitor = visitor or PageVisitor()
        self.batch_size = batch_size

    async def run(
        self,
        session: BrowserSession,
        request: CrawlRequest,
        mode: Optional[OutputMode] = None,
    ) -> List[PageVisitResult]:
        """Visit the seed and, when enabled, its same-origin links; results in visit order."""
        logger.info(
            "Crawl start: %s (traverse=%s, max_pages=%d)",
            request.url, request.traverse_links, request.max_pages,
        )
        start = time.monotonic()
        frontier = Frontier(request.max_pages, request.traverse_links)
        frontier.start(request.url)
        results: List[PageVisitResult] = []

        first = frontier.next()
        if first is not None and frontier.record_visit(first):
            result = await self.visitor.visit(
                session, first,
                is_first_page=True,
                credentials=request.credentials,
                mode=mode,
            )
            self._collect(frontier, result, results)

        while True:
            batch = frontier.next_batch(self.batch_size)
            if not batch:
                break
            for url in batch:
                if not frontier.record_visit(url):
                    continue
                result = await self.visitor.visit(session, url, is_first_page=False, mode=mode)
                self._collect(frontier, result, results)

        duration = time.monotonic() - start
        logger.info(
            "Crawl done: %d pages of %d visited in %.2f s",
            len(results), frontier.visited_count, duration,
        )
        return results

    @staticmethod
    def _collect(
        frontier: Frontier,
        result: Optional[PageVisitResult],
        results: List[PageVisitResult],
    ) -> None:
        if result is None:
            return
        results.append(result)
        frontier.offer_discovered(result.links)
