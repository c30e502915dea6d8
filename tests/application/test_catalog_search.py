"""Tests for the debounced, cancellable Catalog Search."""

import asyncio

import pytest

from rxdraft.application.catalog_search import CatalogSearch
from rxdraft.application.events import (
    EventRecorder,
    Notifier,
    SearchFailed,
    SearchResultsChanged,
)
from tests.fakes import FakeCatalogService, make_medicine


def _setup(debounce: float = 0.3):
    catalog = FakeCatalogService([
        make_medicine(id=1, name="Aspirin"),
        make_medicine(id=2, name="Paracetamol"),
        make_medicine(id=3, name="Amoxicillin"),
    ])
    notifier = Notifier()
    search = CatalogSearch(catalog, notifier, debounce_seconds=debounce)
    return search, catalog, notifier


class GatedCatalog(FakeCatalogService):
    """Holds the response for one query until ``release`` is set."""

    def __init__(self, slow_query: str, medicines) -> None:
        super().__init__(medicines)
        self.slow_query = slow_query
        self.release = asyncio.Event()

    async def search(self, query):
        if query == self.slow_query:
            await self.release.wait()
        return await super().search(query)


@pytest.mark.asyncio
class TestDebounce:

    async def test_typing_burst_issues_one_request_for_last_query(self):
        search, catalog, _ = _setup(debounce=0.3)

        first = asyncio.create_task(search.search("a"))
        await asyncio.sleep(0.1)
        second = asyncio.create_task(search.search("as"))
        await asyncio.sleep(0.1)
        third = asyncio.create_task(search.search("asp"))

        results = await asyncio.gather(first, second, third)

        assert catalog.search_calls == ["asp"]
        assert results[0] == []
        assert results[1] == []
        assert [m.name for m in results[2]] == ["Aspirin"]

    async def test_superseded_call_has_no_side_effect(self):
        search, catalog, notifier = _setup(debounce=0.05)
        recorder = EventRecorder(notifier, SearchResultsChanged)

        stale = asyncio.create_task(search.search("para"))
        await asyncio.sleep(0)
        latest = await search.search("amox")
        assert await stale == []

        assert catalog.search_calls == ["amox"]
        assert [e.query for e in recorder.events] == ["amox"]
        assert [m.name for m in latest] == ["Amoxicillin"]

    async def test_calls_spaced_beyond_debounce_each_dispatch(self):
        search, catalog, _ = _setup(debounce=0.01)
        await search.search("asp")
        await search.search("para")
        assert catalog.search_calls == ["asp", "para"]


@pytest.mark.asyncio
class TestShortQueries:

    @pytest.mark.parametrize("query", ["", "a", " a ", None])
    async def test_short_query_returns_empty_without_request(self, query):
        search, catalog, _ = _setup(debounce=0.01)
        assert await search.search(query) == []
        assert catalog.search_calls == []

    async def test_short_query_clears_previous_results(self):
        search, _, _ = _setup(debounce=0.01)
        await search.search("asp")
        assert search.results
        await search.search("a")
        assert search.results == []


@pytest.mark.asyncio
class TestStaleResults:

    async def test_late_response_is_discarded(self):
        medicines = [make_medicine(id=1, name="Aspirin"), make_medicine(id=2, name="Paracetamol")]
        catalog = GatedCatalog("asp", medicines)
        search = CatalogSearch(catalog, Notifier(), debounce_seconds=0)

        slow = asyncio.create_task(search.search("asp"))
        await asyncio.sleep(0.01)  # slow call is now in flight
        fast = await search.search("para")
        catalog.release.set()

        assert await slow == []
        assert [m.name for m in fast] == ["Paracetamol"]
        assert [m.name for m in search.results] == ["Paracetamol"]
        assert search.last_query == "para"

    async def test_cancel_discards_in_flight_search(self):
        catalog = GatedCatalog("asp", [make_medicine(id=1, name="Aspirin")])
        search = CatalogSearch(catalog, Notifier(), debounce_seconds=0)

        pending = asyncio.create_task(search.search("asp"))
        await asyncio.sleep(0.01)
        search.cancel()
        catalog.release.set()

        assert await pending == []
        assert search.results == []


@pytest.mark.asyncio
class TestFailures:

    async def test_service_error_yields_empty_and_warns(self):
        search, catalog, notifier = _setup(debounce=0.01)
        recorder = EventRecorder(notifier, SearchFailed)
        catalog.fail_search = True

        assert await search.search("asp") == []

        [warning] = recorder.events
        assert warning.query == "asp"
        assert "Failed to search medicines" in warning.message

    async def test_results_are_not_cached_between_queries(self):
        search, catalog, _ = _setup(debounce=0.01)
        await search.search("asp")
        await search.search("asp")
        assert catalog.search_calls == ["asp", "asp"]


@pytest.mark.asyncio
async def test_stream_yields_matches_lazily():
    search, _, _ = _setup(debounce=0.01)
    names = [m.name async for m in search.stream("amox")]
    assert names == ["Amoxicillin"]
