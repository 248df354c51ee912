import json

import pytest

from site_press.config import ServiceConfig
from site_press.crawler.errors import NavigationError
from site_press.crawler.models import CrawlRequest, OutputMode
from site_press.engine import ConversionService, fingerprint


@pytest.fixture()
def service(service_config, renderer, caches) -> ConversionService:
    return ConversionService(service_config, renderer=renderer, caches=caches)


def test_fingerprint_is_deterministic_and_omits_password():
    a = CrawlRequest(url="https://example.com", username="bob", password="one")
    b = CrawlRequest(url="https://example.com", username="bob", password="two")
    assert fingerprint(a) == fingerprint(b)
    assert json.loads(fingerprint(a)) == {
        "url": "https://example.com",
        "username": "bob",
        "traverseLinks": False,
        "maxPages": 10,
    }
    assert fingerprint(a, include_password=True) != fingerprint(b, include_password=True)


def test_fingerprint_distinguishes_parameters():
    base = CrawlRequest(url="https://example.com")
    assert fingerprint(base) != fingerprint(CrawlRequest(url="https://example.com", maxPages=3))
    assert fingerprint(base) != fingerprint(CrawlRequest(url="https://example.com", traverseLinks=True))


@pytest.mark.asyncio()
async def test_second_identical_request_is_served_from_cache(service, renderer):
    request = CrawlRequest(url="https://example.com", traverseLinks=True, maxPages=3)
    first = await service.convert(request, OutputMode.PDF)
    second = await service.convert(request, OutputMode.PDF)
    assert first.content == second.content
    assert renderer.opened == 1


@pytest.mark.asyncio()
async def test_cache_namespaces_are_separate(service, renderer):
    request = CrawlRequest(url="https://example.com")
    await service.convert(request, OutputMode.PDF)
    md = await service.convert(request, OutputMode.MARKDOWN)
    assert isinstance(md.content, str)
    assert renderer.opened == 2


@pytest.mark.asyncio()
async def test_expired_entry_triggers_new_render(service, renderer, clock, caches):
    request = CrawlRequest(url="https://example.com")
    await service.convert(request, OutputMode.MARKDOWN)
    clock.advance(15 * 60)
    await service.convert(request, OutputMode.MARKDOWN)
    assert renderer.opened == 2
    entry_key = service.fingerprint(request)
    assert caches.markdown.get(entry_key) is not None


@pytest.mark.asyncio()
async def test_first_page_failure_is_not_cached(service, renderer, example_site, caches):
    example_site.broken.add("https://example.com")
    request = CrawlRequest(url="https://example.com")
    with pytest.raises(NavigationError):
        await service.convert(request, OutputMode.PDF)
    assert len(caches.pdf) == 0
    assert renderer.closed == 1


@pytest.mark.asyncio()
async def test_markdown_artifact_layout(service):
    request = CrawlRequest(url="https://example.com", traverseLinks=True, maxPages=3)
    artifact = await service.convert(request, OutputMode.MARKDOWN)
    parts = artifact.content.split("\n\n---\n\n")
    assert [p.splitlines()[0] for p in parts] == ["# Example Domain", "# Page 1", "# Page 2"]
    assert artifact.urls == [
        "https://example.com",
        "https://example.com/page1",
        "https://example.com/page2",
    ]


@pytest.mark.asyncio()
async def test_traverse_always_follows_links_and_caches(service, renderer):
    request = CrawlRequest(url="https://example.com", maxPages=3)
    urls = await service.traverse(request)
    assert urls == ["https://example.com", "https://example.com/page1", "https://example.com/page2"]
    assert await service.traverse(request) == urls
    assert renderer.opened == 1


@pytest.mark.asyncio()
async def test_conversion_fills_traversal_cache(service, renderer):
    request = CrawlRequest(url="https://example.com", traverseLinks=True, maxPages=2)
    await service.convert(request, OutputMode.PDF)
    assert await service.traverse(request) == ["https://example.com", "https://example.com/page1"]
    assert renderer.opened == 1


@pytest.mark.asyncio()
async def test_single_page_conversion_leaves_traversal_cache_empty(service, caches):
    request = CrawlRequest(url="https://example.com", traverseLinks=False)
    artifact = await service.convert(request, OutputMode.MARKDOWN)
    assert artifact.pages
    assert len(caches.traverse) == 0


@pytest.mark.asyncio()
async def test_password_opt_in(renderer, caches):
    config = ServiceConfig(fingerprint_includes_password=True)
    service = ConversionService(config, renderer=renderer, caches=caches)
    await service.convert(CrawlRequest(url="https://example.com", username="u", password="a"), OutputMode.PDF)
    await service.convert(CrawlRequest(url="https://example.com", username="u", password="b"), OutputMode.PDF)
    assert renderer.opened == 2
