"""Serper client tests — httpx.MockTransport stands in for the provider.

Tests cover:
    - search(): POST body + key header, first three organic results, displayedLink fallback
    - Per-query TTL cache (normalized query, expiry)
    - Missing key, HTTP errors, transport errors -> WebSearchError
"""

import json

import httpx
import pytest

from chainlab.core.errors import WebSearchError
from chainlab.infrastructure.web_search_client import SerperClient
from tests.fake_serper import SEARCH_URL, make_http_client


class _Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def _client(calls=None, key="test-serper-key", clock=None):
    return SerperClient(
        key, make_http_client(calls), search_url=SEARCH_URL, ttl_seconds=60,
        clock=clock or _Clock(),
    )


@pytest.mark.asyncio
async def test_search_maps_first_three_results():
    calls = []
    results = await _client(calls).search("  Tokyo population  ")
    assert [r.title for r in results] == [
        "Tokyo population 2024", "Greater Tokyo Area", "Japan census",
    ]
    assert results[0].display_link == "stats.test"
    assert results[1].display_link == "https://wiki.test/greater-tokyo"
    request = calls[0]
    assert request.headers["X-API-KEY"] == "test-serper-key"
    assert json.loads(request.content) == {"q": "Tokyo population", "gl": "cn", "hl": "zh-cn"}


@pytest.mark.asyncio
async def test_empty_organic_list():
    assert await _client().search("nothing at all") == []


@pytest.mark.asyncio
async def test_cache_hit_skips_request():
    calls = []
    client = _client(calls)
    first = await client.search("Tokyo population")
    second = await client.search("tokyo POPULATION ")
    assert second == first
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_cache_expires_after_ttl():
    calls = []
    clock = _Clock()
    client = _client(calls, clock=clock)
    await client.search("Tokyo population")
    clock.now += 61
    await client.search("Tokyo population")
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_missing_key_fails_before_any_request():
    calls = []
    with pytest.raises(WebSearchError, match="not configured"):
        await _client(calls, key="").search("Tokyo")
    assert calls == []


@pytest.mark.asyncio
async def test_http_error_status_mapped():
    with pytest.raises(WebSearchError) as info:
        await _client(key="wrong-key").search("Tokyo")
    assert info.value.status_code == 403
    assert info.value.http_status == 502


@pytest.mark.asyncio
async def test_transport_error_mapped():
    def boom(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = SerperClient(
        "test-serper-key", httpx.AsyncClient(transport=httpx.MockTransport(boom)),
        search_url=SEARCH_URL,
    )
    with pytest.raises(WebSearchError, match="failed"):
        await client.search("Tokyo")


@pytest.mark.asyncio
async def test_failed_search_is_not_cached():
    calls = []
    client = _client(calls, key="wrong-key")
    for _ in range(2):
        with pytest.raises(WebSearchError):
            await client.search("Tokyo")
    assert len(calls) == 2
