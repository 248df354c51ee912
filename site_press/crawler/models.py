"""
Data models for the SitePress crawler.
"""
from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Tuple, Union
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OutputMode(str, enum.Enum):
    """Kind of artifact produced for every visited page."""

    PDF = "pdf"
    MARKDOWN = "markdown"


@dataclass(slots=True, frozen=True)
class Credentials:
    username: str
    password: str


class CrawlRequest(BaseModel):
    """Parameters of one conversion or traversal, as accepted from the caller."""
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    url: str = Field(..., description="Absolute http(s) seed URL.")
    username: Optional[str] = None
    password: Optional[str] = None
    traverse_links: bool = Field(False, alias="traverseLinks")
    max_pages: int = Field(10, ge=1, alias="maxPages")

    @field_validator("url")
    def _check_url(cls, v: str) -> str:
        v = v.strip()
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("url must be an absolute http(s) URL")
        return v

    @property
    def credentials(self) -> Optional[Credentials]:
        """Login data, only when both parts are non-empty."""
        if self.username and self.password:
            return Credentials(self.username, self.password)
        return None


@dataclass(slots=True, frozen=True)
class PageVisitResult:
    """Outcome of one successful page visit."""

    url: str
    title: str
    fragment: Union[bytes, str, None]
    links: Tuple[str, ...] = ()


@dataclass(slots=True, frozen=True)
class PageInfo:
    url: str
    title: str


@dataclass(slots=True, frozen=True)
class MergedArtifact:
    """Final document handed back to the caller."""

    content: Union[bytes, str]
    pages: Tuple[PageInfo, ...] = ()

    @property
    def urls(self) -> list[str]:
        return [page.url for page in self.pages]
