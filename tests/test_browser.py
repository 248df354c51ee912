"""Playwright adapter tested against mocked page objects."""
from unittest.mock import AsyncMock, MagicMock

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from site_press.config import ServiceConfig
from site_press.crawler.browser import PlaywrightSession, _resource_blocker, open_session
from site_press.crawler.errors import (
    AuthenticationError,
    NavigationError,
    RenderError,
    ResourceError,
)


@pytest.fixture()
def page():
    page = MagicMock()
    for name in ("goto", "fill", "click", "wait_for_load_state", "title",
                 "eval_on_selector_all", "pdf", "evaluate"):
        setattr(page, name, AsyncMock())
    navigation = MagicMock()
    navigation.__aenter__ = AsyncMock(return_value=None)
    navigation.__aexit__ = AsyncMock(return_value=False)
    page.expect_navigation = MagicMock(return_value=navigation)
    return page


@pytest.fixture()
def session(page):
    browser = MagicMock(close=AsyncMock())
    playwright = MagicMock(stop=AsyncMock())
    return PlaywrightSession(ServiceConfig(navigation_timeout=2.0), playwright, browser, page)


@pytest.mark.asyncio()
async def test_navigate_waits_for_network_idle(session, page):
    await session.navigate("https://example.com")
    page.goto.assert_awaited_once_with("https://example.com", wait_until="networkidle", timeout=2000.0)


@pytest.mark.asyncio()
async def test_navigation_timeout_becomes_navigation_error(session, page):
    page.goto.side_effect = PlaywrightTimeout("Timeout 2000ms exceeded")
    with pytest.raises(NavigationError):
        await session.navigate("https://example.com")


@pytest.mark.asyncio()
async def test_idle_wait_failure_becomes_navigation_error(session, page):
    page.wait_for_load_state.side_effect = PlaywrightTimeout("Timeout")
    with pytest.raises(NavigationError):
        await session.wait_for_network_idle()


@pytest.mark.asyncio()
async def test_submit_credentials_uses_configured_selectors(session, page):
    await session.submit_credentials("alice", "s3cret")
    filled = [call.args[:2] for call in page.fill.await_args_list]
    assert filled == [('input[name="username"]', "alice"), ('input[name="password"]', "s3cret")]
    page.click.assert_awaited_once()
    assert page.click.await_args.args[0] == 'button[type="submit"]'


@pytest.mark.asyncio()
async def test_missing_login_form_is_authentication_error(session, page):
    page.fill.side_effect = PlaywrightTimeout("waiting for locator('input[name=\"username\"]')")
    with pytest.raises(AuthenticationError):
        await session.submit_credentials("alice", "s3cret")


@pytest.mark.asyncio()
async def test_extract_links_is_one_call(session, page):
    page.eval_on_selector_all.return_value = ["https://example.com/a", None, "https://example.com/b"]
    assert await session.extract_links() == ["https://example.com/a", "https://example.com/b"]
    assert page.eval_on_selector_all.await_args.args[0] == "a[href]"


@pytest.mark.asyncio()
async def test_render_pdf_applies_options(session, page):
    page.pdf.return_value = b"%PDF"
    assert await session.render_pdf() == b"%PDF"
    kwargs = page.pdf.await_args.kwargs
    assert kwargs["format"] == "A4"
    assert kwargs["print_background"] is True
    assert kwargs["margin"] == {"top": "20px", "right": "20px", "bottom": "20px", "left": "20px"}


@pytest.mark.asyncio()
async def test_render_failure_becomes_render_error(session, page):
    page.pdf.side_effect = PlaywrightError("Printing failed")
    with pytest.raises(RenderError):
        await session.render_pdf()


@pytest.mark.asyncio()
async def test_main_content_selectors_are_passed(session, page):
    page.evaluate.return_value = "<main>x</main>"
    assert await session.extract_main_content_html() == "<main>x</main>"
    assert page.evaluate.await_args.args[1] == ["main", "article", ".content", "#content"]


@pytest.mark.asyncio()
async def test_close_failure_is_resource_error_and_stops_driver(session):
    session._browser.close.side_effect = PlaywrightError("Target closed")
    with pytest.raises(ResourceError):
        await session.close()
    session._playwright.stop.assert_awaited_once()


@pytest.mark.asyncio()
async def test_driver_stop_failure_is_resource_error(session):
    session._playwright.stop.side_effect = PlaywrightError("driver gone")
    with pytest.raises(ResourceError, match="driver stop failed"):
        await session.close()


@pytest.mark.asyncio()
async def test_both_close_failures_are_reported(session):
    session._browser.close.side_effect = PlaywrightError("Target closed")
    session._playwright.stop.side_effect = ConnectionError("pipe closed")
    with pytest.raises(ResourceError) as info:
        await session.close()
    assert "Target closed" in str(info.value)
    assert "pipe closed" in str(info.value)


@pytest.mark.asyncio()
async def test_open_session_keeps_body_outcome_when_stop_fails(session):
    session._playwright.stop.side_effect = PlaywrightError("driver gone")
    renderer = MagicMock(open=AsyncMock(return_value=session))
    with pytest.raises(RuntimeError, match="boom"):
        async with open_session(renderer):
            raise RuntimeError("boom")
    async with open_session(renderer) as opened:
        result = opened is session
    assert result


@pytest.mark.asyncio()
async def test_open_session_closes_on_error():
    fake = MagicMock(close=AsyncMock())
    renderer = MagicMock(open=AsyncMock(return_value=fake))
    with pytest.raises(RuntimeError):
        async with open_session(renderer):
            raise RuntimeError("boom")
    fake.close.assert_awaited_once()


@pytest.mark.asyncio()
async def test_resource_blocker():
    handler = _resource_blocker(frozenset({"image"}))
    image = MagicMock(abort=AsyncMock(), continue_=AsyncMock())
    image.request.resource_type = "image"
    document = MagicMock(abort=AsyncMock(), continue_=AsyncMock())
    document.request.resource_type = "document"
    await handler(image)
    await handler(document)
    image.abort.assert_awaited_once()
    document.continue_.assert_awaited_once()
    document.abort.assert_not_awaited()
