"""
Exercise Catalog Client

Searches the local exercises table first and falls back to the remote proxy
when the table has nothing for the query. Results are cached per client in an
explicit SearchCache; entries are never invalidated (reference data).
"""
import asyncio
import logging
from typing import Callable, Dict, List, Optional, Set, Tuple

from fitplan_api.config import settings
from fitplan_api.errors import FitPlanError, NotFound, RemoteUnavailable, ValidationError
from fitplan_api.models import Exercise
from fitplan_api.catalog.proxy import ExerciseProxyClient
from fitplan_api.repositories.exercises import (
    FILTER_COLUMNS,
    MIN_NAME_FILTER_LENGTH,
    ExerciseRepository,
    is_active_filter,
)

logger = logging.getLogger(__name__)

SearchKey = Tuple[str, str, str]


def make_search_key(
    term: Optional[str] = None,
    body_part: Optional[str] = None,
    equipment: Optional[str] = None,
) -> SearchKey:
    """(normalized term, body part filter, equipment filter); inactive filters become 'all'."""
    return (
        (term or "").strip().lower(),
        body_part if is_active_filter(body_part) else "all",
        equipment if is_active_filter(equipment) else "all",
    )


class SearchCache:
    """
    Search results keyed by SearchKey.

    Each entry remembers the row limit it was fetched with. A list shorter than
    that limit is the complete result; a full one may have been truncated, so a
    request for more rows than were fetched is a miss.
    """

    def __init__(self):
        self._entries: Dict[SearchKey, Tuple[List[Exercise], Optional[int]]] = {}

    def get(self, key: SearchKey, limit: Optional[int] = None) -> Optional[List[Exercise]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        exercises, fetched_limit = entry
        truncated = fetched_limit is not None and len(exercises) >= fetched_limit
        if truncated and limit is not None and limit > fetched_limit:
            return None
        return exercises

    def put(
        self,
        key: SearchKey,
        exercises: List[Exercise],
        fetched_limit: Optional[int] = None,
    ) -> None:
        """Store results; fetched_limit=None marks them as complete."""
        self._entries[key] = (list(exercises), fetched_limit)

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: SearchKey) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class ExerciseCatalogClient:
    """Local-first exercise search with remote fallback."""

    def __init__(
        self,
        repository: Optional[ExerciseRepository] = None,
        proxy: Optional[ExerciseProxyClient] = None,
        cache: Optional[SearchCache] = None,
        default_limit: Optional[int] = None,
    ):
        self.repository = repository or ExerciseRepository()
        self.proxy = proxy or ExerciseProxyClient()
        self.cache = cache if cache is not None else SearchCache()
        self.default_limit = default_limit or settings.SEARCH_LIMIT

    async def search(
        self,
        term: Optional[str] = None,
        body_part: Optional[str] = None,
        equipment: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Exercise]:
        """
        Search the catalog.

        Raises:
            RemoteUnavailable: the remote fallback could not be reached
            RateLimited: the remote fallback is throttling requests
        """
        limit = limit or self.default_limit
        key = make_search_key(term, body_part, equipment)

        cached = self.cache.get(key, limit)
        if cached is not None:
            logger.debug(f"Search cache HIT: {key}")
            return cached[:limit]

        term = (term or "").strip()
        # Too short to filter the local table by name; the remote catalog still gets it
        name = term if len(term) >= MIN_NAME_FILTER_LENGTH else ""
        body_part = body_part if is_active_filter(body_part) else None
        equipment = equipment if is_active_filter(equipment) else None

        try:
            local = await asyncio.to_thread(
                self.repository.search, name, body_part, equipment, limit
            )
        except RemoteUnavailable as e:
            logger.warning(f"Local exercise search failed, using remote catalog: {e}")
            local = []

        if local:
            self.cache.put(key, local, fetched_limit=limit)
            return local[:limit]

        # The remote list is not truncated here, so it is cached as complete
        remote = await self.proxy.search(term or None, body_part, equipment)
        self.cache.put(key, remote)
        return remote[:limit]

    async def filter_options(self, kind: str) -> List[str]:
        """Distinct body part or equipment values for filter lists."""
        if kind not in FILTER_COLUMNS:
            raise ValidationError("Type must be 'bodyPart' or 'equipment'")
        try:
            values = await asyncio.to_thread(self.repository.distinct_values, kind)
        except RemoteUnavailable as e:
            logger.warning(f"Local filter lookup failed, using remote catalog: {e}")
            values = []
        if values:
            return values
        return await self.proxy.filter_options(kind)

    async def get_exercise(self, exercise_id: str) -> Exercise:
        exercise = await asyncio.to_thread(self.repository.get, exercise_id)
        if exercise is None:
            raise NotFound(f"Exercise {exercise_id} not found")
        return exercise


class DebouncedSearch:
    """
    Coalesces rapid query changes into one search per settling period.

    A submit() before the window elapses replaces the pending query. Results of
    a search whose key is no longer the latest submitted key are dropped.
    """

    def __init__(
        self,
        client: ExerciseCatalogClient,
        on_results: Callable[[List[Exercise]], None],
        on_error: Optional[Callable[[FitPlanError], None]] = None,
        delay_ms: Optional[int] = None,
    ):
        self.client = client
        self.on_results = on_results
        self.on_error = on_error
        self.delay = (delay_ms if delay_ms is not None else settings.SEARCH_DEBOUNCE_MS) / 1000
        self._timer: Optional[asyncio.TimerHandle] = None
        self._active_key: Optional[SearchKey] = None
        self._in_flight: Set[asyncio.Task] = set()

    @property
    def active_key(self) -> Optional[SearchKey]:
        return self._active_key

    def submit(
        self,
        term: Optional[str] = None,
        body_part: Optional[str] = None,
        equipment: Optional[str] = None,
    ) -> None:
        key = make_search_key(term, body_part, equipment)
        self._active_key = key
        if self._timer is not None:
            self._timer.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.delay, self._fire, key, term, body_part, equipment)

    def cancel(self) -> None:
        """Drop the pending query and ignore anything still in flight."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._active_key = None

    async def wait_idle(self) -> None:
        """Wait until no search is pending or in flight."""
        while self._timer is not None or self._in_flight:
            if self._in_flight:
                await asyncio.gather(*self._in_flight, return_exceptions=True)
            else:
                await asyncio.sleep(self.delay / 2 or 0.001)

    def _fire(self, key: SearchKey, term, body_part, equipment) -> None:
        self._timer = None
        task = asyncio.get_running_loop().create_task(self._run(key, term, body_part, equipment))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)

    async def _run(self, key: SearchKey, term, body_part, equipment) -> None:
        try:
            results = await self.client.search(term, body_part, equipment)
        except FitPlanError as e:
            if key == self._active_key and self.on_error:
                self.on_error(e)
            else:
                logger.debug(f"Ignoring error from stale search {key}: {e}")
            return

        if key != self._active_key:
            logger.debug(f"Discarding stale search results for {key}")
            return
        self.on_results(results)
