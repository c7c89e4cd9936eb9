"""
Reference Data Cache

Process-wide cache of the Platform -> Operator -> Brand hierarchy and the
game catalog.

Features:
- Per-resource entries holding entities, derived filter options, loading and
  error flags, and the last successful fetch time
- Lazy TTL staleness (evaluated at read time, no background timer)
- Fetch deduplication: one in-flight request per resource
- Stale-data fallback: a failed fetch keeps the previous entities
"""

import asyncio
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

import structlog

from backoffice.models import FilterOption, ReferenceEntity, Resource
from backoffice.utils.retry import RetryPolicy, call_with_retry

logger = structlog.get_logger(__name__)

HIERARCHY_TTL_SECONDS = 30 * 60
GAMES_TTL_SECONDS = 12 * 60 * 60

DEFAULT_TTLS: Dict[Resource, float] = {
    Resource.PLATFORMS: HIERARCHY_TTL_SECONDS,
    Resource.OPERATORS: HIERARCHY_TTL_SECONDS,
    Resource.BRANDS: HIERARCHY_TTL_SECONDS,
    Resource.GAMES: GAMES_TTL_SECONDS,
}


@dataclass(frozen=True)
class CacheEntry:
    """Snapshot of one resource. Entries are replaced whole, never mutated."""
    data: Tuple[ReferenceEntity, ...] = ()
    options: Tuple[FilterOption, ...] = ()
    loading: bool = False
    error: Optional[str] = None
    last_fetched: Optional[float] = None


def build_options(entities: Iterable[ReferenceEntity]) -> Tuple[FilterOption, ...]:
    """Project entities to options, first occurrence per id wins, sorted by label."""
    seen: Dict[str, FilterOption] = {}
    for entity in entities:
        option = entity.to_option()
        if option.id not in seen:
            seen[option.id] = option
    return tuple(sorted(seen.values(), key=lambda o: o.label.casefold()))


class ReferenceDataCache:
    """
    Explicit state container for reference data.

    Reads (``get_entities``, ``get_options``, ``should_fetch``) never block.
    ``fetch`` is the only writer apart from ``clear``.

    Example:
        cache = ReferenceDataCache(fetcher, gate)
        if cache.should_fetch(Resource.PLATFORMS):
            await cache.fetch(Resource.PLATFORMS)
        options = cache.get_options(Resource.PLATFORMS)
    """

    def __init__(
        self,
        fetcher,
        gate=None,
        ttls: Optional[Mapping[Resource, float]] = None,
        retry_policy: Optional[RetryPolicy] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fetcher = fetcher
        self.gate = gate
        self.retry_policy = retry_policy
        self._clock = clock
        self._ttls: Dict[Resource, float] = {**DEFAULT_TTLS, **(ttls or {})}
        self._entries: Dict[Resource, CacheEntry] = {r: CacheEntry() for r in Resource}
        self._inflight: Dict[Resource, asyncio.Task] = {}
        self._generation = 0

    @classmethod
    def from_settings(cls, fetcher, gate, settings, **kwargs) -> "ReferenceDataCache":
        hierarchy = settings.cache.hierarchy_ttl_seconds
        ttls = {
            Resource.PLATFORMS: hierarchy,
            Resource.OPERATORS: hierarchy,
            Resource.BRANDS: hierarchy,
            Resource.GAMES: settings.cache.games_ttl_seconds,
        }
        return cls(fetcher, gate, ttls=ttls, retry_policy=RetryPolicy.from_settings(settings), **kwargs)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_entry(self, resource: Resource) -> CacheEntry:
        return self._entries[resource]

    def get_entities(self, resource: Resource) -> List[ReferenceEntity]:
        return list(self._entries[resource].data)

    def get_options(self, resource: Resource) -> List[FilterOption]:
        return list(self._entries[resource].options)

    def label_map(self, resource: Resource) -> Dict[str, str]:
        return {option.id: option.label for option in self._entries[resource].options}

    def is_loading(self, resource: Resource) -> bool:
        return self._entries[resource].loading

    def ttl(self, resource: Resource) -> float:
        return self._ttls[resource]

    def set_ttl(self, resource: Resource, seconds: float) -> None:
        self._ttls[resource] = seconds

    def is_stale(self, resource: Resource) -> bool:
        last_fetched = self._entries[resource].last_fetched
        if last_fetched is None:
            return True
        return self._clock() - last_fetched > self._ttls[resource]

    def should_fetch(self, resource: Resource) -> bool:
        entry = self._entries[resource]
        return not entry.data or entry.error is not None or self.is_stale(resource)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def _gate_open(self, resource: Resource) -> bool:
        if self.gate is None or self.gate.is_ready:
            return True
        logger.debug("Fetch suppressed until authenticated", resource=resource.value)
        return False

    def _start_fetch(self, resource: Resource, params: Optional[Dict[str, Any]]) -> asyncio.Task:
        existing = self._inflight.get(resource)
        if existing is not None:
            logger.debug("Joining in-flight fetch", resource=resource.value)
            return existing

        self._entries[resource] = replace(self._entries[resource], loading=True)
        task = asyncio.get_running_loop().create_task(self._run_fetch(resource, params, self._generation))
        self._inflight[resource] = task
        return task

    async def _run_fetch(self, resource: Resource, params: Optional[Dict[str, Any]], generation: int) -> None:
        start = time.perf_counter()
        logger.info("Fetching reference data", resource=resource.value)

        try:
            if self.retry_policy is not None:
                entities = await call_with_retry(self.fetcher.fetch, resource, params, policy=self.retry_policy)
            else:
                entities = await self.fetcher.fetch(resource, params)
        except Exception as e:
            if generation == self._generation:
                self._entries[resource] = replace(self._entries[resource], loading=False, error=str(e))
            logger.warning(
                "Reference data fetch failed",
                resource=resource.value,
                error=str(e),
                kept_entities=len(self._entries[resource].data),
            )
        else:
            if generation != self._generation:
                logger.info("Discarding fetch completed after cache clear", resource=resource.value)
                return
            data = tuple(entities)
            self._entries[resource] = CacheEntry(
                data=data,
                options=build_options(data),
                loading=False,
                error=None,
                last_fetched=self._clock(),
            )
            logger.info(
                "Reference data fetched",
                resource=resource.value,
                count=len(data),
                duration_ms=round((time.perf_counter() - start) * 1000, 2),
            )
        finally:
            if self._inflight.get(resource) is asyncio.current_task():
                del self._inflight[resource]
            if generation == self._generation and self._entries[resource].loading:
                self._entries[resource] = replace(self._entries[resource], loading=False)

    async def fetch(self, resource: Resource, params: Optional[Dict[str, Any]] = None) -> None:
        """
        Fetch ``resource`` and replace its entry.

        Concurrent callers share the in-flight request; a caller being
        cancelled does not cancel the shared fetch. Failures are recorded on
        the entry instead of raised.
        """
        if not self._gate_open(resource):
            return
        await asyncio.shield(self._start_fetch(resource, params))

    def ensure_fresh(self, resource: Resource, params: Optional[Dict[str, Any]] = None) -> Optional[asyncio.Task]:
        """Schedule a background fetch when the entry needs one; never blocks."""
        if not self.should_fetch(resource) or not self._gate_open(resource):
            return self._inflight.get(resource)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop, skipping background fetch", resource=resource.value)
            return None
        return self._start_fetch(resource, params)

    async def refresh_all(self) -> None:
        await asyncio.gather(*(self.fetch(resource) for resource in Resource))

    def clear_error(self, resource: Resource) -> None:
        self._entries[resource] = replace(self._entries[resource], error=None)

    def clear_errors(self) -> None:
        for resource in Resource:
            self.clear_error(resource)

    def clear(self) -> None:
        """Drop every entry; fetches still in flight are discarded on completion."""
        self._generation += 1
        self._entries = {r: CacheEntry() for r in Resource}
        self._inflight = {}
        logger.info("Reference cache cleared", generation=self._generation)
