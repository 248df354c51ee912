"""site_press.utils: small helpers shared by the HTTP handlers and the CLI."""

from __future__ import annotations

import re
from typing import Sequence

__all__: Sequence[str] = ("sanitize_filename", "attachment_header")

_PROTOCOL_RE = re.compile(r"https?://", re.IGNORECASE)
_UNSAFE_RE = re.compile(r"[^a-z0-9]", re.IGNORECASE)


def sanitize_filename(url: str) -> str:
    """Strip the protocol and replace every non-alphanumeric character with ``_``."""
    return _UNSAFE_RE.sub("_", _PROTOCOL_RE.sub("", url, count=1))


def attachment_header(url: str, extension: str) -> str:
    """Value of the Content-Disposition header for an artifact derived from *url*."""
    return f'attachment; filename="{sanitize_filename(url)}.{extension}"'
