"""
HTTP surface of SitePress (aiohttp.web).

Routes
------
POST /api/convert      merged PDF of the crawled pages
POST /api/to-markdown  merged Markdown of the crawled pages
POST /api/traverse     JSON list of the URLs a crawl visits

Every failure answers ``{"error": <message>}`` with status 400 or 500.
"""
from __future__ import annotations

import asyncio
import contextlib
import json
from typing import Any, AsyncIterator, Dict, Optional

from aiohttp import web
from pydantic import ValidationError

from site_press.cache import ArtifactCaches
from site_press.config import ServiceConfig
from site_press.crawler.browser import Renderer
from site_press.crawler.models import CrawlRequest, OutputMode
from site_press.engine import ConversionService
from site_press.logger import logger
from site_press.utils import attachment_header

__all__ = ["SERVICE_KEY", "create_app", "run"]

SERVICE_KEY = web.AppKey("service", ConversionService)

_CONVERT_FAILED = {
    OutputMode.PDF: "Failed to convert website to PDF",
    OutputMode.MARKDOWN: "Failed to convert website to Markdown",
}
_TRAVERSE_FAILED = "Failed to traverse website"


class RequestRejected(Exception):
    """The request body cannot be turned into a CrawlRequest."""


def _error(message: str, status: int) -> web.Response:
    return web.json_response({"error": message}, status=status)


async def _parse_request(request: web.Request) -> CrawlRequest:
    try:
        body: Any = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestRejected("Invalid JSON body") from exc
    if not isinstance(body, dict):
        raise RequestRejected("Request body must be a JSON object")
    if not body.get("url"):
        raise RequestRejected("URL is required")
    try:
        return CrawlRequest.model_validate(body)
    except ValidationError as exc:
        first: Dict[str, Any] = exc.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise RequestRejected(f"Invalid {field}: {first.get('msg')}") from exc


async def _convert(request: web.Request, mode: OutputMode) -> web.Response:
    try:
        crawl_request = await _parse_request(request)
    except RequestRejected as exc:
        return _error(str(exc), 400)

    service = request.app[SERVICE_KEY]
    try:
        artifact = await service.convert(crawl_request, mode)
    except Exception:
        logger.exception("Error handling %s request for %s", mode.value, crawl_request.url)
        return _error(_CONVERT_FAILED[mode], 500)

    if mode is OutputMode.PDF:
        return web.Response(
            body=bytes(artifact.content),
            content_type="application/pdf",
            headers={"Content-Disposition": attachment_header(crawl_request.url, "pdf")},
        )
    return web.Response(
        text=str(artifact.content),
        content_type="text/markdown",
        headers={"Content-Disposition": attachment_header(crawl_request.url, "md")},
    )


async def handle_convert(request: web.Request) -> web.Response:
    return await _convert(request, OutputMode.PDF)


async def handle_to_markdown(request: web.Request) -> web.Response:
    return await _convert(request, OutputMode.MARKDOWN)


async def handle_traverse(request: web.Request) -> web.Response:
    try:
        crawl_request = await _parse_request(request)
    except RequestRejected as exc:
        return _error(str(exc), 400)

    service = request.app[SERVICE_KEY]
    try:
        urls = await service.traverse(crawl_request)
    except Exception:
        logger.exception("Error traversing website %s", crawl_request.url)
        return _error(_TRAVERSE_FAILED, 500)

    return web.json_response(
        {
            "success": True,
            "message": f"Website traversed successfully (found {len(urls)} URLs)",
            "urls": urls,
        }
    )


async def _cache_sweeper(app: web.Application) -> AsyncIterator[None]:
    task = asyncio.create_task(app[SERVICE_KEY].caches.run_sweeper())
    yield
    task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await task


def create_app(
    config: ServiceConfig,
    renderer: Optional[Renderer] = None,
    caches: Optional[ArtifactCaches] = None,
) -> web.Application:
    """Build the application; the cache sweeper lives as long as the app runs."""
    app = web.Application()
    app[SERVICE_KEY] = ConversionService(config, renderer=renderer, caches=caches)
    app.router.add_post("/api/convert", handle_convert)
    app.router.add_post("/api/to-markdown", handle_to_markdown)
    app.router.add_post("/api/traverse", handle_traverse)
    app.cleanup_ctx.append(_cache_sweeper)
    return app


def run(config: ServiceConfig) -> None:
    """Serve until interrupted."""
    logger.info("Server running on %s:%d", config.host, config.port)
    web.run_app(create_app(config), host=config.host, port=config.port, print=None)
