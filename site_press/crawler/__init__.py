"""site_press.crawler: frontier, page visits and browser sessions."""

from site_press.crawler.errors import (
    AuthenticationError,
    CrawlError,
    NavigationError,
    RenderError,
    ResourceError,
)
from site_press.crawler.models import CrawlRequest, MergedArtifact, OutputMode, PageVisitResult

__all__ = [
    "AuthenticationError",
    "CrawlError",
    "CrawlRequest",
    "MergedArtifact",
    "NavigationError",
    "OutputMode",
    "PageVisitResult",
    "RenderError",
    "ResourceError",
]
