from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional

import httpx
from loguru import logger
from pydantic import ValidationError

from .address import Address
from .config import ProviderConfig
from .exceptions import ProviderError
from .models import parse_land_response, parse_ogcio_response
from .sorter import LandResultSorter

OGCIO_HEADERS = {
    "Accept": "application/json",
    "Accept-Language": "en,zh-Hant",
    "Accept-Encoding": "gzip",
}


class TextProvider(ABC):
    @abstractmethod
    async def search(self, address: str, limit: Optional[int] = None) -> List[Address]:
        ...


class SpatialProvider(ABC):
    @abstractmethod
    async def search(self, address: str) -> List[Address]:
        ...


async def _fetch(
    client: httpx.AsyncClient,
    provider: str,
    url: str,
    params: dict[str, Any],
    parse: Callable[[Any], list],
    headers: Optional[dict[str, str]] = None,
) -> list:
    """GET *url* and run the decoded JSON through *parse*; every failure becomes ProviderError."""
    logger.debug("{provider} request {params}", provider=provider, params=params)
    try:
        response = await client.get(url, params=params, headers=headers)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        logger.warning("{provider} returned HTTP {status}", provider=provider, status=exc.response.status_code)
        raise ProviderError(provider, f"HTTP {exc.response.status_code}") from exc
    except httpx.HTTPError as exc:
        logger.warning("{provider} request error: {error!r}", provider=provider, error=exc)
        raise ProviderError(provider, f"request error: {exc!r}") from exc
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderError(provider, "response is not valid JSON") from exc
    try:
        records = parse(payload)
    except ValidationError as exc:
        raise ProviderError(provider, f"unexpected response shape: {exc.error_count()} error(s)") from exc
    logger.debug("{provider} returned {count} record(s)", provider=provider, count=len(records))
    return records


class OGCIOProvider(TextProvider):
    """OGCIO Address Lookup Service; results come back ranked by OGCIO's own score."""

    name = "ogcio"

    def __init__(self, client: httpx.AsyncClient, config: Optional[ProviderConfig] = None) -> None:
        self.client = client
        self.config = config or ProviderConfig()

    async def search(self, address: str, limit: Optional[int] = None) -> List[Address]:
        params = {"q": address, "n": limit or self.config.record_count}
        records = await _fetch(
            self.client, self.name, self.config.ogcio_url, params, parse_ogcio_response, headers=OGCIO_HEADERS
        )
        return [Address.from_ogcio(record) for record in records]


class LandProvider(SpatialProvider):
    """Lands Department location search, reprojected to WGS84 and sorted by relevance."""

    name = "land"

    def __init__(
        self, client: httpx.AsyncClient, sorter: LandResultSorter, config: Optional[ProviderConfig] = None
    ) -> None:
        self.client = client
        self.sorter = sorter
        self.config = config or ProviderConfig()

    async def search(self, address: str) -> List[Address]:
        records = await _fetch(self.client, self.name, self.config.land_url, {"q": address}, parse_land_response)
        return self.sorter.sort(address, [Address.from_land(record) for record in records])
