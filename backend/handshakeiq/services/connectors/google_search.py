# backend/handshakeiq/services/connectors/google_search.py
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .base import BaseConnector
from ..errors import SearchUnavailable
from ...core.config import get_settings
from ...schemas.search import RawSearchResult

logger = logging.getLogger(__name__)

MAX_RESULTS_PER_QUERY = 10  # Custom Search API hard limit


class GoogleSearchClient(BaseConnector):
    """
    Search client over the Google Custom Search JSON API.

    - One outbound GET per `search` call, bounded by SEARCH_TIMEOUT_SECONDS.
    - Never retries: every failure surfaces as SearchUnavailable and the
      caller decides whether to try again (each call burns quota).
    - Results are normalised into RawSearchResult in API rank order.

    An `http_client` may be injected (tests pass one backed by
    httpx.MockTransport); otherwise a short-lived client is opened per call.
    """

    name = "google_search"

    def __init__(
        self,
        http_client: Optional[httpx.AsyncClient] = None,
        api_key: Optional[str] = None,
        engine_id: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self._http_client = http_client
        self._api_key = api_key if api_key is not None else settings.GOOGLE_SEARCH_API_KEY
        self._engine_id = engine_id if engine_id is not None else settings.GOOGLE_SEARCH_ENGINE_ID
        self.base_url = settings.GOOGLE_SEARCH_BASE_URL
        self.timeout = settings.SEARCH_TIMEOUT_SECONDS

    def is_configured(self) -> bool:
        return bool(self._api_key and self._engine_id)

    def _params(self, query: str, num: int) -> Dict[str, Any]:
        return {
            "key": self._api_key,
            "cx": self._engine_id,
            "q": query,
            "num": num,
        }

    @staticmethod
    def _parse_results(data: Dict[str, Any]) -> List[RawSearchResult]:
        results: List[RawSearchResult] = []

        for item in data.get("items") or []:
            if not isinstance(item, dict):
                continue
            link = item.get("link")
            if not isinstance(link, str) or not link.strip():
                continue

            thumbnail_url: Optional[str] = None
            pagemap = item.get("pagemap")
            if isinstance(pagemap, dict):
                thumbs = pagemap.get("cse_thumbnail")
                if isinstance(thumbs, list) and thumbs and isinstance(thumbs[0], dict):
                    src = thumbs[0].get("src")
                    if isinstance(src, str) and src:
                        thumbnail_url = src

            results.append(
                RawSearchResult(
                    title=str(item.get("title") or ""),
                    link=link.strip(),
                    snippet=str(item.get("snippet") or ""),
                    thumbnail_url=thumbnail_url,
                )
            )

        return results

    async def _get(self, client: httpx.AsyncClient, params: Dict[str, Any]) -> httpx.Response:
        try:
            return await client.get(self.base_url, params=params, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise SearchUnavailable(f"Search API timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise SearchUnavailable(f"Search API unreachable: {e}") from e

    async def search(self, query: str, max_results: int = MAX_RESULTS_PER_QUERY) -> List[RawSearchResult]:
        """
        Run one web search and return ranked results.

        Raises:
            ValueError: query is empty after trimming.
            SearchUnavailable: missing credentials, transport failure, timeout,
                non-2xx status or an unreadable body.
        """
        query = (query or "").strip()
        if not query:
            raise ValueError("search query must not be empty")

        if not self.is_configured():
            raise SearchUnavailable("Google Search API not configured")

        num = max(1, min(int(max_results), MAX_RESULTS_PER_QUERY))
        params = self._params(query, num)

        if self._http_client is not None:
            resp = await self._get(self._http_client, params)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await self._get(client, params)

        if not resp.is_success:
            logger.warning(
                "Search API returned HTTP %s",
                resp.status_code,
                extra={"connector": self.name, "query": query},
            )
            raise SearchUnavailable(
                f"Search API returned HTTP {resp.status_code}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
        except ValueError as e:
            raise SearchUnavailable("Search API returned a non-JSON body") from e
        if not isinstance(data, dict):
            raise SearchUnavailable("Search API returned an unexpected payload")

        results = self._parse_results(data)
        logger.info(
            "Search returned %d results",
            len(results),
            extra={"connector": self.name, "query": query},
        )
        return results
