"""site_press.aggregator: merges per-page fragments into one artifact."""

from __future__ import annotations

import io
from typing import List, Sequence

from pypdf import PdfReader, PdfWriter
from pypdf.errors import PyPdfError

from site_press.crawler.errors import RenderError
from site_press.crawler.models import MergedArtifact, OutputMode, PageInfo, PageVisitResult

__all__ = ["MARKDOWN_SEPARATOR", "merge", "merge_pdf", "merge_markdown"]

MARKDOWN_SEPARATOR = "\n\n---\n\n"


def merge_pdf(fragments: Sequence[bytes]) -> bytes:
    """Concatenate PDF documents page by page; no input gives empty bytes."""
    if not fragments:
        return b""
    writer = PdfWriter()
    for index, fragment in enumerate(fragments):
        try:
            reader = PdfReader(io.BytesIO(fragment))
            for page in reader.pages:
                writer.add_page(page)
        except (PyPdfError, ValueError) as exc:
            raise RenderError(f"Page {index} is not a readable PDF: {exc}") from exc
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def merge_markdown(fragments: Sequence[str]) -> str:
    """Join Markdown documents with a horizontal rule between them."""
    return MARKDOWN_SEPARATOR.join(fragments)


def _pages(results: Sequence[PageVisitResult]) -> tuple[PageInfo, ...]:
    return tuple(PageInfo(url=r.url, title=r.title) for r in results)


def merge(results: Sequence[PageVisitResult], mode: OutputMode) -> MergedArtifact:
    """Build the merged artifact from results in visitation order."""
    fragments: List = [r.fragment for r in results if r.fragment is not None]
    if mode is OutputMode.PDF:
        content = merge_pdf(fragments)
    elif mode is OutputMode.MARKDOWN:
        content = merge_markdown(fragments)
    else:
        raise ValueError(f"Unsupported output mode: {mode!r}")
    return MergedArtifact(content=content, pages=_pages(results))
