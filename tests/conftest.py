# File: tests/conftest.py
from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

import pytest
from pypdf import PdfWriter

from site_press.cache import ArtifactCaches
from site_press.config import ServiceConfig
from site_press.crawler.errors import (
    AuthenticationError,
    NavigationError,
    RenderError,
    ResourceError,
)


def make_pdf(pages: int = 1) -> bytes:
    """Return a PDF document with *pages* blank A4 pages."""
    writer = PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=595, height=842)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@dataclass
class FakePage:
    title: str
    links: Sequence[str] = ()
    html: str = "<main><p>content</p></main>"


@dataclass
class FakeSite:
    """Scripted website served by :class:`FakeRenderer`."""

    pages: Dict[str, FakePage] = field(default_factory=dict)
    broken: Set[str] = field(default_factory=set)
    login_fails: bool = False
    pdf_fails: bool = False
    close_fails: bool = False


class FakeSession:
    def __init__(self, site: FakeSite, renderer: "FakeRenderer") -> None:
        self.site = site
        self.renderer = renderer
        self.current: Optional[str] = None
        self.closed = False

    async def navigate(self, url: str) -> None:
        self.renderer.navigations.append(url)
        if url in self.site.broken or url not in self.site.pages:
            raise NavigationError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
        self.current = url

    async def submit_credentials(self, username: str, password: str) -> None:
        self.renderer.logins.append((username, password))
        if self.site.login_fails:
            raise AuthenticationError("No node found for selector: input[name=\"username\"]")

    async def wait_for_network_idle(self) -> None:
        return None

    async def title(self) -> str:
        return self.site.pages[self.current].title

    async def extract_links(self) -> List[str]:
        return list(self.site.pages[self.current].links)

    async def render_pdf(self) -> bytes:
        if self.site.pdf_fails:
            raise RenderError("Printing failed")
        return make_pdf(1)

    async def extract_main_content_html(self) -> str:
        return self.site.pages[self.current].html

    async def close(self) -> None:
        self.closed = True
        self.renderer.closed += 1
        if self.site.close_fails:
            raise ResourceError("Target closed")


class FakeRenderer:
    """Renderer double recording every interaction."""

    def __init__(self, site: FakeSite) -> None:
        self.site = site
        self.opened = 0
        self.closed = 0
        self.navigations: List[str] = []
        self.logins: List[tuple] = []

    async def open(self) -> FakeSession:
        self.opened += 1
        return FakeSession(self.site, self)


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def service_config() -> ServiceConfig:
    return ServiceConfig(port=8080, navigation_timeout=2.0)


@pytest.fixture()
def example_site() -> FakeSite:
    """example.com with a home page linking to two pages and some noise."""
    return FakeSite(
        pages={
            "https://example.com": FakePage(
                "Example Domain",
                links=[
                    "https://example.com/page1",
                    "https://example.com/page2",
                    "https://other.org/elsewhere",
                    "https://example.com/page1#top",
                    "https://example.com/logo.png",
                ],
                html="<main><h2>Home</h2><p>Welcome</p></main>",
            ),
            "https://example.com/page1": FakePage(
                "Page 1",
                links=["https://example.com/", "https://example.com/page3"],
                html="<main><p>First</p></main>",
            ),
            "https://example.com/page2": FakePage(
                "Page 2", html="<main><p>Second</p></main>"
            ),
            "https://example.com/page3": FakePage(
                "Page 3", html="<main><p>Third</p></main>"
            ),
        }
    )


@pytest.fixture()
def renderer(example_site: FakeSite) -> FakeRenderer:
    return FakeRenderer(example_site)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def caches(clock: FakeClock) -> ArtifactCaches:
    return ArtifactCaches(ttl=15 * 60, sweep_interval=60 * 60, clock=clock)
