"""
Link eligibility and URL normalization utilities for SitePress.
"""
from __future__ import annotations

from typing import FrozenSet, Optional
from urllib.parse import urlparse, urlunparse

#: suffixes of binary or non-document resources never queued for a visit
DENIED_EXTENSIONS: FrozenSet[str] = frozenset(
    {
        ".pdf", ".zip", ".gz", ".tar", ".rar", ".7z",
        ".jpg", ".jpeg", ".png", ".gif", ".svg", ".webp", ".ico", ".bmp",
        ".mp4", ".mp3", ".avi", ".mov", ".webm", ".wav", ".ogg",
        ".exe", ".dmg", ".iso", ".woff", ".woff2", ".ttf",
        ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    }
)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def origin_of(url: str) -> Optional[str]:
    """
    Return ``scheme://host[:port]`` of an http(s) URL, or None.

    Default ports are dropped so that ``https://a:443`` and ``https://a``
    share one origin.
    """
    try:
        parsed = urlparse(url.strip())
        scheme = parsed.scheme.lower()
        host = parsed.hostname
        port = parsed.port
    except ValueError:
        return None
    if scheme not in _DEFAULT_PORTS or not host:
        return None
    if port is None or port == _DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}"
    return f"{scheme}://{host}:{port}"


def is_eligible(candidate: str, base_origin: str) -> bool:
    """
    Decide whether *candidate* may join the crawl frontier.

    Root-relative links are resolved against *base_origin* first. The
    candidate must share the origin, carry no fragment marker and not point
    at a denied file type. Malformed input is never eligible.
    """
    if not isinstance(candidate, str) or not isinstance(base_origin, str):
        return False
    href = candidate.strip()
    if not href or "#" in href:
        return False
    if href.startswith("/") and not href.startswith("//"):
        href = base_origin.rstrip("/") + href

    origin = origin_of(href)
    if origin is None or origin != origin_of(base_origin):
        return False
    try:
        path = urlparse(href).path.lower()
    except ValueError:
        return False
    return not path.endswith(tuple(DENIED_EXTENSIONS))


def url_key(url: str) -> str:
    """
    Normalize URL for deduplication: lowercase scheme and host, drop default
    ports and the fragment, use ``/`` for an empty path.
    """
    try:
        parsed = urlparse(url.strip())
        origin = origin_of(url)
    except ValueError:
        return url
    if origin is None:
        return url
    path = parsed.path or "/"
    return origin + urlunparse(("", "", path, parsed.params, parsed.query, ""))
