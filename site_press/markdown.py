"""site_press.markdown: HTML → Markdown conversion of rendered pages."""

from __future__ import annotations

from bs4 import BeautifulSoup
from markdownify import ATX, UNDERSCORE, MarkdownConverter as _BaseConverter

__all__ = ["MarkdownConverter", "page_document"]

_DROPPED_TAGS = ("script", "style", "noscript")


class _PageConverter(_BaseConverter):
    """markdownify converter that always emits images as ``![alt](src)``."""

    def convert_img(self, el, text, *args, **kwargs):
        alt = el.attrs.get("alt") or ""
        src = el.attrs.get("src") or ""
        return f"![{alt}]({src})" if src else ""


class MarkdownConverter:
    """Converts the main-content HTML of a page into Markdown."""

    def __init__(self, **options) -> None:
        defaults = {
            "heading_style": ATX,
            "bullets": "-",
            "strong_em_symbol": UNDERSCORE,
            "code_language": "",
        }
        defaults.update(options)
        self._converter = _PageConverter(**defaults)

    def convert(self, html: str) -> str:
        if not html:
            return ""
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(list(_DROPPED_TAGS)):
            tag.decompose()
        return self._converter.convert_soup(soup).strip()


def page_document(title: str, url: str, body: str) -> str:
    """Per-page fragment: title heading, source URL line, converted body."""
    return f"# {title}\n\nURL: {url}\n\n{body}"
