"""
Browser sessions: the boundary between SitePress and the headless browser.

A session is one page of one browser, reused for every URL of a request so
that cookies set by the login survive across pages. :func:`open_session`
guarantees the session is released on every exit path.
"""
from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Protocol, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from site_press.config import ServiceConfig
from site_press.crawler.errors import (
    AuthenticationError,
    NavigationError,
    RenderError,
    ResourceError,
)
from site_press.logger import logger

__all__ = (
    "BrowserSession",
    "Renderer",
    "PlaywrightRenderer",
    "PlaywrightSession",
    "open_session",
)

# Runs inside the page; resolved absolute hrefs of every anchor, in document order.
_LINKS_JS = "els => els.map(e => e.href).filter(Boolean)"

_MAIN_CONTENT_JS = """
selectors => {
    for (const selector of selectors) {
        const el = document.querySelector(selector);
        if (el) return el.outerHTML;
    }
    return document.body ? document.body.outerHTML : "";
}
"""


class BrowserSession(Protocol):
    """Operations SitePress needs from a rendered page."""

    async def navigate(self, url: str) -> None: ...

    async def submit_credentials(self, username: str, password: str) -> None: ...

    async def wait_for_network_idle(self) -> None: ...

    async def title(self) -> str: ...

    async def extract_links(self) -> List[str]: ...

    async def render_pdf(self) -> bytes: ...

    async def extract_main_content_html(self) -> str: ...

    async def close(self) -> None: ...


class Renderer(Protocol):
    async def open(self) -> BrowserSession: ...


@asynccontextmanager
async def open_session(renderer: Renderer) -> AsyncIterator[BrowserSession]:
    """Open a browser session and close it whatever happens inside the block."""
    session = await renderer.open()
    try:
        yield session
    finally:
        try:
            await session.close()
        except ResourceError as exc:
            logger.warning("Browser session was not closed cleanly: %s", exc)


class PlaywrightSession:
    """Chromium page driven through the Playwright async API."""

    def __init__(self, config: ServiceConfig, playwright: Any, browser: Any, page: Any) -> None:
        self.config = config
        self._playwright = playwright
        self._browser = browser
        self.page = page

    @property
    def _timeout_ms(self) -> float:
        return self.config.navigation_timeout * 1000

    async def navigate(self, url: str) -> None:
        try:
            await self.page.goto(url, wait_until="networkidle", timeout=self._timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError(f"Navigation to {url} failed: {exc}") from exc

    async def submit_credentials(self, username: str, password: str) -> None:
        login = self.config.login
        try:
            await self.page.fill(login.username_selector, username, timeout=self._timeout_ms)
            await self.page.fill(login.password_selector, password, timeout=self._timeout_ms)
            async with self.page.expect_navigation(
                wait_until="networkidle", timeout=self._timeout_ms
            ):
                await self.page.click(login.submit_selector, timeout=self._timeout_ms)
        except PlaywrightError as exc:
            raise AuthenticationError(str(exc)) from exc

    async def wait_for_network_idle(self) -> None:
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self._timeout_ms)
        except PlaywrightError as exc:
            raise NavigationError(f"Page never became idle: {exc}") from exc

    async def title(self) -> str:
        try:
            return await self.page.title()
        except PlaywrightError as exc:
            raise RenderError(f"Cannot read page title: {exc}") from exc

    async def extract_links(self) -> List[str]:
        try:
            links = await self.page.eval_on_selector_all("a[href]", _LINKS_JS)
        except PlaywrightError as exc:
            raise RenderError(f"Link extraction failed: {exc}") from exc
        return [link for link in links if isinstance(link, str)]

    async def render_pdf(self) -> bytes:
        opts = self.config.pdf
        margin = {side: opts.margin for side in ("top", "right", "bottom", "left")}
        try:
            return await self.page.pdf(
                format=opts.format,
                print_background=opts.print_background,
                margin=margin,
            )
        except PlaywrightError as exc:
            raise RenderError(f"PDF rendering failed: {exc}") from exc

    async def extract_main_content_html(self) -> str:
        try:
            return await self.page.evaluate(_MAIN_CONTENT_JS, list(self.config.content_selectors))
        except PlaywrightError as exc:
            raise RenderError(f"Content extraction failed: {exc}") from exc

    async def close(self) -> None:
        """Close the browser, then stop the driver even if that failed."""
        failures = []
        try:
            await self._browser.close()
        except PlaywrightError as exc:
            failures.append(f"browser close failed: {exc}")
        try:
            await self._playwright.stop()
        except Exception as exc:
            failures.append(f"driver stop failed: {exc}")
        if failures:
            raise ResourceError("; ".join(failures))


class PlaywrightRenderer:
    """Launches one headless chromium per session."""

    def __init__(self, config: ServiceConfig) -> None:
        self.config = config

    async def open(self) -> PlaywrightSession:
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self.config.headless,
                args=list(self.config.browser_args),
            )
            page = await browser.new_page()
            blocked = frozenset(self.config.blocked_resource_types)
            if blocked:
                await page.route("**/*", _resource_blocker(blocked))
        except PlaywrightError as exc:
            await playwright.stop()
            raise NavigationError(f"Browser launch failed: {exc}") from exc
        except BaseException:
            await playwright.stop()
            raise
        logger.debug("Browser session opened")
        return PlaywrightSession(self.config, playwright, browser, page)


def _resource_blocker(blocked: Sequence[str]):
    async def _handle(route: Any) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    return _handle
