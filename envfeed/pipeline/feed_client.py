from __future__ import annotations

import copy
import time
from typing import Any, Dict, List, Optional

import httpx

from envfeed.simulator.generator import MOCK_EVENTS


class FeedError(Exception):
    """Any failure to obtain a record list from the feed."""


class FeedTransportError(FeedError):
    pass


class FeedStatusError(FeedError):
    def __init__(self, status_code: int):
        super().__init__(f"HTTP {status_code}")
        self.status_code = status_code


class FeedFormatError(FeedError):
    pass


def extract_records(data: Any) -> List[Dict[str, Any]]:
    """The one accepted body shape is a top-level JSON array.

    Array items are passed through as-is (non-object items are normalized
    to empty records later). Objects, scalars and null are rejected.
    """
    if not isinstance(data, list):
        raise FeedFormatError(f"expected a JSON array, got {type(data).__name__}")
    return data


class HttpFeedSource:
    """GETs the feed URL and returns the raw record list."""

    def __init__(
        self,
        url: str,
        timeout_s: float = 10.0,
        cache_bust: bool = True,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url = url
        self.cache_bust = cache_bust
        self._client = client or httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)

    def _params(self) -> Dict[str, str]:
        if not self.cache_bust:
            return {}
        return {"t": str(int(time.time() * 1000))}

    async def fetch_records(self) -> List[Dict[str, Any]]:
        try:
            resp = await self._client.get(self.url, params=self._params())
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise FeedTransportError(str(e) or type(e).__name__) from e

        if not resp.is_success:
            raise FeedStatusError(resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            raise FeedFormatError(f"invalid JSON body: {e}") from e

        return extract_records(data)

    async def aclose(self) -> None:
        await self._client.aclose()


class MockFeedSource:
    """In-memory feed used when no URL is configured."""

    def __init__(self, records: Optional[List[Dict[str, Any]]] = None):
        self._records: List[Dict[str, Any]] = copy.deepcopy(
            MOCK_EVENTS if records is None else records
        )

    @property
    def records(self) -> List[Dict[str, Any]]:
        return copy.deepcopy(self._records)

    def append(self, record: Dict[str, Any]) -> None:
        self._records.append(dict(record))

    async def fetch_records(self) -> List[Dict[str, Any]]:
        return extract_records(copy.deepcopy(self._records))

    async def aclose(self) -> None:
        return None
