"""Tests for local-first exercise search, caching and debouncing."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from fitplan_api.catalog.client import (
    DebouncedSearch,
    ExerciseCatalogClient,
    SearchCache,
    make_search_key,
)
from fitplan_api.catalog.proxy import ExerciseProxyClient
from fitplan_api.errors import NotFound, RateLimited, RemoteUnavailable, ValidationError
from fitplan_api.models import Exercise
from fitplan_api.repositories.exercises import ExerciseRepository

BENCH = Exercise(id="0025", name="barbell bench press", body_part="Peito", equipment="Barra", target="Peitorais")
SQUAT = Exercise(id="0043", name="barbell full squat", body_part="Pernas", equipment="Barra", target="Quadríceps")


def _catalog(local=None, remote=None, local_exc=None, remote_exc=None, default_limit=50):
    repository = MagicMock(spec=ExerciseRepository)
    if local_exc is not None:
        repository.search.side_effect = local_exc
    else:
        repository.search.return_value = local or []
    proxy = MagicMock(spec=ExerciseProxyClient)
    if remote_exc is not None:
        proxy.search = AsyncMock(side_effect=remote_exc)
    else:
        proxy.search = AsyncMock(return_value=remote or [])
    proxy.filter_options = AsyncMock(return_value=[])
    return ExerciseCatalogClient(repository=repository, proxy=proxy, default_limit=default_limit)


class TestSearchKey:
    def test_term_is_trimmed_and_lowercased(self):
        assert make_search_key("  Bench ", None, None) == ("bench", "all", "all")

    def test_all_and_empty_filters_collapse(self):
        assert make_search_key("", "all", "") == make_search_key(None, None, None)

    def test_filters_kept_verbatim(self):
        assert make_search_key("x", "Peito", "Barra") == ("x", "Peito", "Barra")


class TestSearchCache:
    def test_put_and_get(self):
        cache = SearchCache()
        key = make_search_key("bench")
        cache.put(key, [BENCH])
        assert key in cache
        assert cache.get(key) == [BENCH]
        assert len(cache) == 1
        cache.clear()
        assert cache.get(key) is None

    def test_truncated_entry_misses_for_larger_limit(self):
        cache = SearchCache()
        key = make_search_key("bench")
        cache.put(key, [BENCH, SQUAT], fetched_limit=2)
        assert cache.get(key, 2) == [BENCH, SQUAT]
        assert cache.get(key, 10) is None

    def test_short_entry_is_complete(self):
        cache = SearchCache()
        key = make_search_key("bench")
        cache.put(key, [BENCH], fetched_limit=5)
        assert cache.get(key, 50) == [BENCH]


class TestLocalFirstSearch:
    @pytest.mark.asyncio
    async def test_local_hit_skips_remote(self):
        catalog = _catalog(local=[BENCH])
        results = await catalog.search("bench")
        assert results == [BENCH]
        catalog.proxy.search.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_empty_local_falls_back_to_remote(self):
        catalog = _catalog(local=[], remote=[SQUAT])
        results = await catalog.search("squat", "Pernas", "all")
        assert results == [SQUAT]
        catalog.proxy.search.assert_awaited_once_with("squat", "Pernas", None)

    @pytest.mark.asyncio
    async def test_local_failure_falls_back_to_remote(self):
        catalog = _catalog(local_exc=RemoteUnavailable("db down"), remote=[SQUAT])
        assert await catalog.search("squat") == [SQUAT]

    @pytest.mark.asyncio
    async def test_identical_query_served_from_cache(self):
        catalog = _catalog(local=[], remote=[SQUAT])
        await catalog.search("Squat")
        await catalog.search("  squat  ")
        assert catalog.proxy.search.await_count == 1
        assert catalog.repository.search.call_count == 1

    @pytest.mark.asyncio
    async def test_empty_remote_result_is_cached(self):
        catalog = _catalog(local=[], remote=[])
        assert await catalog.search("zzz") == []
        assert await catalog.search("zzz") == []
        assert catalog.proxy.search.await_count == 1

    @pytest.mark.asyncio
    async def test_single_character_term_does_not_filter_by_name(self):
        catalog = _catalog(local=[BENCH, SQUAT])
        await catalog.search("b")
        catalog.repository.search.assert_called_once_with("", None, None, 50)

    @pytest.mark.asyncio
    async def test_results_truncated_to_limit(self):
        many = [Exercise(id=str(i), name=f"exercise {i}") for i in range(10)]
        catalog = _catalog(local=[], remote=many)
        assert len(await catalog.search("exercise", limit=4)) == 4

    @pytest.mark.asyncio
    async def test_rate_limit_surfaces_and_is_not_cached(self):
        catalog = _catalog(local=[], remote_exc=RateLimited())
        with pytest.raises(RateLimited):
            await catalog.search("bench")
        assert make_search_key("bench") not in catalog.cache

    @pytest.mark.asyncio
    async def test_remote_unavailable_surfaces(self):
        catalog = _catalog(local=[], remote_exc=RemoteUnavailable("timeout"))
        with pytest.raises(RemoteUnavailable):
            await catalog.search("bench")

    @pytest.mark.asyncio
    async def test_larger_limit_after_small_one_refetches(self):
        rows = [Exercise(id=str(i), name=f"bench variation {i}") for i in range(20)]
        catalog = _catalog()
        catalog.repository.search.side_effect = lambda name, bp, eq, limit: rows[:limit]

        assert len(await catalog.search("bench", limit=3)) == 3
        assert len(await catalog.search("bench", limit=20)) == 20
        assert catalog.repository.search.call_count == 2

    @pytest.mark.asyncio
    async def test_complete_local_result_serves_larger_limit_from_cache(self):
        catalog = _catalog(local=[BENCH])
        await catalog.search("bench", limit=3)
        assert await catalog.search("bench", limit=20) == [BENCH]
        assert catalog.repository.search.call_count == 1

    @pytest.mark.asyncio
    async def test_remote_result_cached_whole(self):
        many = [Exercise(id=str(i), name=f"exercise {i}") for i in range(10)]
        catalog = _catalog(local=[], remote=many)
        assert len(await catalog.search("exercise", limit=4)) == 4
        assert len(await catalog.search("exercise", limit=10)) == 10
        assert catalog.proxy.search.await_count == 1

    @pytest.mark.asyncio
    async def test_short_term_still_sent_to_remote(self):
        catalog = _catalog(local=[], remote=[BENCH])
        assert await catalog.search(" b ") == [BENCH]
        catalog.repository.search.assert_called_once_with("", None, None, 50)
        catalog.proxy.search.assert_awaited_once_with("b", None, None)


class TestFilterOptions:
    @pytest.mark.asyncio
    async def test_invalid_kind(self):
        catalog = _catalog()
        with pytest.raises(ValidationError):
            await catalog.filter_options("target")

    @pytest.mark.asyncio
    async def test_local_values_preferred(self):
        catalog = _catalog()
        catalog.repository.distinct_values.return_value = ["Costas", "Peito"]
        assert await catalog.filter_options("bodyPart") == ["Costas", "Peito"]
        catalog.proxy.filter_options.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remote_used_when_local_empty(self):
        catalog = _catalog()
        catalog.repository.distinct_values.return_value = []
        catalog.proxy.filter_options = AsyncMock(return_value=["Barra", "Haltere"])
        assert await catalog.filter_options("equipment") == ["Barra", "Haltere"]


class TestGetExercise:
    @pytest.mark.asyncio
    async def test_missing_exercise(self):
        catalog = _catalog()
        catalog.repository.get.return_value = None
        with pytest.raises(NotFound):
            await catalog.get_exercise("9999")


# ---------------------------------------------------------------------------
# Debounced search
# ---------------------------------------------------------------------------


class SlowClient:
    """Catalog stand-in whose latency depends on the term."""

    def __init__(self, delays=None, errors=None):
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls = []

    async def search(self, term=None, body_part=None, equipment=None, limit=None):
        self.calls.append(term)
        await asyncio.sleep(self.delays.get(term, 0))
        if term in self.errors:
            raise self.errors[term]
        return [Exercise(id=term, name=term)]


class TestDebouncedSearch:
    @pytest.mark.asyncio
    async def test_rapid_submits_coalesce_into_one_search(self):
        client = SlowClient()
        delivered = []
        debounced = DebouncedSearch(client, delivered.append, delay_ms=20)

        for term in ["b", "be", "ben", "bench"]:
            debounced.submit(term)
        await debounced.wait_idle()

        assert client.calls == ["bench"]
        assert [r[0].name for r in delivered] == ["bench"]

    @pytest.mark.asyncio
    async def test_stale_response_is_discarded(self):
        client = SlowClient(delays={"slow": 0.1})
        delivered = []
        debounced = DebouncedSearch(client, delivered.append, delay_ms=5)

        debounced.submit("slow")
        await asyncio.sleep(0.03)
        debounced.submit("fast")
        await debounced.wait_idle()

        assert client.calls == ["slow", "fast"]
        assert [r[0].name for r in delivered] == ["fast"]

    @pytest.mark.asyncio
    async def test_error_for_active_query_is_reported(self):
        client = SlowClient(errors={"bench": RateLimited()})
        errors = []
        debounced = DebouncedSearch(client, lambda results: None, on_error=errors.append, delay_ms=5)

        debounced.submit("bench")
        await debounced.wait_idle()

        assert len(errors) == 1
        assert isinstance(errors[0], RateLimited)

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_query(self):
        client = SlowClient()
        delivered = []
        debounced = DebouncedSearch(client, delivered.append, delay_ms=20)

        debounced.submit("bench")
        debounced.cancel()
        await debounced.wait_idle()
        await asyncio.sleep(0.04)

        assert client.calls == []
        assert delivered == []
        assert debounced.active_key is None
