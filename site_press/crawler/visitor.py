"""
Page visitor: drives one URL through navigation, optional login, idle wait,
link extraction and artifact-fragment production.
"""
from __future__ import annotations

from typing import Optional

from site_press.crawler.browser import BrowserSession
from site_press.crawler.errors import AuthenticationError, NavigationError
from site_press.crawler.models import Credentials, OutputMode, PageVisitResult
from site_press.logger import logger
from site_press.markdown import MarkdownConverter, page_document

__all__ = ("PageVisitor",)


class PageVisitor:
    """Visits pages against an already opened browser session."""

    def __init__(self, converter: Optional[MarkdownConverter] = None) -> None:
        self.converter = converter or MarkdownConverter()

    async def visit(
        self,
        session: BrowserSession,
        url: str,
        *,
        is_first_page: bool,
        credentials: Optional[Credentials] = None,
        mode: Optional[OutputMode] = None,
    ) -> Optional[PageVisitResult]:
        """
        Visit *url* and return its result.

        Returns None when a non-first page cannot be loaded; on the first page
        the NavigationError propagates. With ``mode=None`` only title and links
        are collected.
        """
        logger.info("Visiting: %s", url)
        try:
            await session.navigate(url)
            if is_first_page and credentials is not None:
                await self._login(session, credentials)
            await session.wait_for_network_idle()
        except NavigationError as exc:
            if is_first_page:
                raise
            logger.warning("Skipping %s: %s", url, exc)
            return None

        title = await session.title()
        links = await session.extract_links()

        fragment: bytes | str | None = None
        if mode is OutputMode.PDF:
            fragment = await session.render_pdf()
        elif mode is OutputMode.MARKDOWN:
            html = await session.extract_main_content_html()
            fragment = page_document(title, url, self.converter.convert(html))

        return PageVisitResult(url=url, title=title, fragment=fragment, links=tuple(links))

    @staticmethod
    async def _login(session: BrowserSession, credentials: Credentials) -> None:
        try:
            await session.submit_credentials(credentials.username, credentials.password)
        except AuthenticationError as exc:
            logger.warning("Login attempt failed: %s", exc)
