"""
Failure taxonomy of a crawl run.

Navigation failures are fatal on the first page only, authentication
failures are always recovered, render failures abort the whole request.
"""


class CrawlError(Exception):
    """Base class for every failure raised while crawling."""


class NavigationError(CrawlError):
    """A page could not be loaded or never settled."""


class AuthenticationError(CrawlError):
    """The login form could not be filled in or submitted."""


class RenderError(CrawlError):
    """The artifact fragment of a loaded page could not be produced."""


class ResourceError(CrawlError):
    """The browser session could not be released."""
