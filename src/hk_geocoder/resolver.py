"""Resolve free-text Hong Kong addresses by reconciling OGCIO and Lands Department results."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Iterable, List, Optional, Sequence, TypeVar

import httpx
from loguru import logger

from .address import Address, Language
from .config import ResolverConfig
from .providers import LandProvider, OGCIOProvider, SpatialProvider, TextProvider
from .sorter import LandResultSorter, ScoringWeights

T = TypeVar("T")


async def _gather_or_cancel(awaitables: Iterable[Awaitable[T]]) -> List[T]:
    """Await everything; on the first failure (or cancellation) cancel the rest and re-raise."""
    tasks = [asyncio.ensure_future(aw) for aw in awaitables]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


class AddressResolver:
    """
    Reconciles the OGCIO text lookup with the Lands Department spatial lookup.

    Use as an async context manager so the shared HTTP client is closed:

        async with AddressResolver() as resolver:
            results = await resolver.resolve("中環皇后大道中1號")

    Providers may be injected; an injected client is never closed here.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        *,
        client: Optional[httpx.AsyncClient] = None,
        text_provider: Optional[TextProvider] = None,
        spatial_provider: Optional[SpatialProvider] = None,
    ) -> None:
        self.config = config or ResolverConfig()
        self._owns_client = client is None and (text_provider is None or spatial_provider is None)
        if self._owns_client:
            client = httpx.AsyncClient(timeout=self.config.providers.timeout)
        self._client = client
        self.text_provider = text_provider or OGCIOProvider(client, self.config.providers)
        self.spatial_provider = spatial_provider or LandProvider(
            client,
            LandResultSorter(
                ScoringWeights(
                    coverage_weight=self.config.scoring.coverage_weight,
                    similarity_weight=self.config.scoring.similarity_weight,
                    doorplate_weight=self.config.scoring.doorplate_weight,
                )
            ),
            self.config.providers,
        )

    @property
    def near_threshold(self) -> float:
        return self.config.reconcile.near_threshold

    # ── Public API ────────────────────────────────────────────────

    async def resolve(self, address: str) -> List[Address]:
        """Return the best-ordered addresses for *address*; ProviderError propagates."""
        text_results, land_results = await _gather_or_cancel(
            [self.text_provider.search(address), self.spatial_provider.search(address)]
        )
        return await self._reconcile(address, text_results, land_results)

    async def resolve_many(
        self, addresses: Sequence[str], concurrency_limit: Optional[int] = None
    ) -> List[List[Address]]:
        """
        Resolve every address with at most *concurrency_limit* in flight.

        Results are returned in input order. The first failure cancels the
        outstanding work and is raised; no partial results are returned.
        """
        limit = concurrency_limit if concurrency_limit is not None else self.config.runtime.concurrency_limit
        if limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        if not addresses:
            return []

        queue: asyncio.Queue[tuple[int, str]] = asyncio.Queue()
        for item in enumerate(addresses):
            queue.put_nowait(item)
        results: List[Optional[List[Address]]] = [None] * len(addresses)

        async def worker() -> None:
            while True:
                try:
                    index, address = queue.get_nowait()
                except asyncio.QueueEmpty:
                    return
                results[index] = await self.resolve(address)

        logger.info("Resolving {count} address(es), concurrency {limit}", count=len(addresses), limit=limit)
        await _gather_or_cancel(worker() for _ in range(min(limit, len(addresses))))
        logger.info("Resolved {count} address(es)", count=len(addresses))
        return results  # type: ignore[return-value]

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()

    async def __aenter__(self) -> AddressResolver:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.aclose()

    # ── Reconciliation ────────────────────────────────────────────

    async def _reconcile(
        self, address: str, text_results: List[Address], land_results: List[Address]
    ) -> List[Address]:
        if not land_results:
            logger.debug("No land result for {address!r}, using OGCIO ranking", address=address)
            return text_results

        # The best land match is not always land_results[0], so check the whole list
        if text_results and self._agrees_with_any(text_results[0], land_results):
            logger.debug("OGCIO top result agrees with land for {address!r}", address=address)
            return text_results

        anchor = land_results[0]
        near = self._near_anchor(text_results, anchor)
        if near:
            logger.debug("{count} OGCIO result(s) near the top land result", count=len(near))
            return near

        land_text = anchor.full_address(Language.CHINESE)
        if land_text:
            logger.debug("Re-querying OGCIO with land address {text!r}", text=land_text)
            retried = await self.text_provider.search(land_text)
            if retried and retried[0].distance_to(anchor) < self.near_threshold:
                return retried
            # TODO: scan the rest of the re-queried results for one near the anchor

        logger.debug("Falling back to land ranking for {address!r}", address=address)
        return land_results

    def _agrees_with_any(self, best: Address, land_results: Sequence[Address]) -> bool:
        for land in land_results:
            if best.distance_to(land) < self.near_threshold:
                return True
        return False

    def _near_anchor(self, text_results: Sequence[Address], anchor: Address) -> List[Address]:
        paired: List[tuple[Address, float]] = []
        for candidate in text_results:
            distance = candidate.distance_to(anchor)
            if distance < self.near_threshold:
                paired.append((candidate, distance))
        paired.sort(key=lambda pair: pair[1])
        return [candidate.with_distance(distance) for candidate, distance in paired]


async def resolve(address: str, config: Optional[ResolverConfig] = None) -> List[Address]:
    async with AddressResolver(config) as resolver:
        return await resolver.resolve(address)


async def resolve_many(
    addresses: Sequence[str], concurrency_limit: int = 10, config: Optional[ResolverConfig] = None
) -> List[List[Address]]:
    async with AddressResolver(config) as resolver:
        return await resolver.resolve_many(addresses, concurrency_limit=concurrency_limit)
