"""Serper Web Search Client — async httpx wrapper for Google results via google.serper.dev.

Invariants:
    - Only the first max_results organic results are kept
    - display_link falls back to link when the provider omits displayedLink
    - Transport failures and non-2xx HTTP statuses raise WebSearchError (never httpx errors)
    - A missing API key fails fast before any request is made
    - Results are cached per normalized query (stripped, lower-cased) for ttl_seconds

Design Decisions:
    - Same shape as QWeatherClient: the lifespan's shared httpx.AsyncClient is injected,
      tests pass a MockTransport-backed one
    - Cache is a plain dict of (expires_at, results) with an injectable clock
"""

import logging
import time
from dataclasses import asdict, dataclass
from typing import Any, Callable

import httpx

from chainlab.core.errors import WebSearchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchResult:
    title: str
    link: str
    snippet: str
    display_link: str

    @classmethod
    def from_organic(cls, item: dict[str, Any]) -> "SearchResult":
        link = item.get("link") or ""
        return cls(
            title=item.get("title") or "",
            link=link,
            snippet=item.get("snippet") or "",
            display_link=item.get("displayedLink") or link,
        )

    def to_dict(self) -> dict[str, str]:
        return asdict(self)


class SerperClient:
    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        search_url: str = "https://google.serper.dev/search",
        ttl_seconds: float = 3600,
        max_results: int = 3,
        country: str = "cn",
        language: str = "zh-cn",
        clock: Callable[[], float] = time.monotonic,
    ):
        self.api_key = api_key
        self.http = http_client
        self.search_url = search_url
        self.ttl_seconds = ttl_seconds
        self.max_results = max_results
        self.country = country
        self.language = language
        self.clock = clock
        self._cache: dict[str, tuple[float, list[SearchResult]]] = {}

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def search(self, query: str) -> list[SearchResult]:
        key = query.strip().lower()
        cached = self._cache.get(key)
        now = self.clock()
        if cached and cached[0] > now:
            logger.info("Web search cache hit")
            return cached[1]

        results = await self._fetch(query.strip())
        self._cache[key] = (now + self.ttl_seconds, results)
        return results

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _fetch(self, query: str) -> list[SearchResult]:
        if not self.api_key:
            raise WebSearchError("Serper API key is not configured")
        try:
            response = await self.http.post(
                self.search_url,
                headers={"X-API-KEY": self.api_key},
                json={"q": query, "gl": self.country, "hl": self.language},
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            raise WebSearchError(
                f"HTTP {e.response.status_code} from {self.search_url}", e.response.status_code,
            )
        except (httpx.HTTPError, ValueError) as e:
            raise WebSearchError(f"Request to {self.search_url} failed: {e}")
        organic = (data.get("organic") or []) if isinstance(data, dict) else []
        results = [
            SearchResult.from_organic(item)
            for item in organic if isinstance(item, dict)
        ][:self.max_results]
        logger.info(f"Web search returned {len(results)} result(s)")
        return results
