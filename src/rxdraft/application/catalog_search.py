"""Application service: Catalog Search.

Debounced, cancellable medicine lookup. Every call to ``search()`` takes a
new generation number; after the debounce delay only the newest call is
dispatched, and a response that arrives after a newer call started is
discarded instead of applied. Search is advisory: failures are logged and
reported as ``SearchFailed`` events, never raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator

from rxdraft.application.events import Notifier, SearchFailed, SearchResultsChanged
from rxdraft.domain.exceptions import ServiceError
from rxdraft.domain.model.medicine import Medicine
from rxdraft.domain.repository.catalog_service import CatalogService

logger = logging.getLogger(__name__)

DEBOUNCE_SECONDS = 0.3
MIN_QUERY_LENGTH = 2


class CatalogSearch:

    def __init__(
        self,
        catalog: CatalogService,
        notifier: Notifier,
        debounce_seconds: float = DEBOUNCE_SECONDS,
        min_query_length: int = MIN_QUERY_LENGTH,
    ) -> None:
        self._catalog = catalog
        self._notifier = notifier
        self._debounce_seconds = debounce_seconds
        self._min_query_length = min_query_length
        self._generation = 0
        self.results: list[Medicine] = []
        self.last_query = ""

    async def search(self, query: str) -> list[Medicine]:
        """Return catalog matches for *query*, or [] if superseded.

        Supersedes any call still waiting on its debounce timer or on the
        catalog response.
        """
        self._generation += 1
        generation = self._generation
        query = (query or "").strip()

        if len(query) < self._min_query_length:
            self._apply(query, [])
            return []

        await asyncio.sleep(self._debounce_seconds)
        if generation != self._generation:
            return []

        logger.debug("Searching catalog for %r", query)
        try:
            found = await self._catalog.search(query)
        except (ServiceError, asyncio.TimeoutError) as exc:
            if generation != self._generation:
                return []
            logger.warning("Medicine search for %r failed: %s", query, exc)
            self._notifier.publish(
                SearchFailed(
                    query=query,
                    message="Failed to search medicines. Please check your connection.",
                )
            )
            self._apply(query, [])
            return []

        if generation != self._generation:
            logger.debug("Discarding stale results for %r", query)
            return []

        self._apply(query, found)
        return list(found)

    async def stream(self, query: str) -> AsyncIterator[Medicine]:
        """Lazy form of ``search()``: yields each match in catalog order."""
        for medicine in await self.search(query):
            yield medicine

    def cancel(self) -> None:
        """Invalidate pending and in-flight searches (e.g. the view closed)."""
        self._generation += 1

    def _apply(self, query: str, found: list[Medicine]) -> None:
        self.results = list(found)
        self.last_query = query
        self._notifier.publish(SearchResultsChanged(query=query, results=tuple(found)))
