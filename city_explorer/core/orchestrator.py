"""
city_explorer/core/orchestrator.py
═══════════════════════════════════════════════════════════════════════════════
Cache-aside control flow, one pass per request:

  CHECKING_CACHE ─┬─ Fresh ───────────────────────────────────→ RESPONDING
                  └─ Stale / Empty → FETCHING → MAPPING → PERSISTING → RESPONDING

Guarantees:
  1. read → fetch → write is strictly sequential for a request
  2. every write is awaited before the records are returned
  3. a failure at any step propagates as a typed CacheError; nothing partial
  4. ONE in-flight fetch per cache key: concurrent lookups for the same key
     queue on a per-key asyncio.Lock and re-check the cache when they get it,
     so N simultaneous misses cost one upstream call and one set of rows
═══════════════════════════════════════════════════════════════════════════════
"""

import asyncio
import logging
import time
from typing import Awaitable, Callable, Optional

from city_explorer.core.descriptor import ResourceDescriptor, ResourceType
from city_explorer.core.errors import ConfigurationError, NoDataError, StorageError
from city_explorer.core.freshness import Fresh, FreshnessPolicy
from city_explorer.core.gateway import StorageGateway
from city_explorer.core.mappers import MAPPERS
from city_explorer.core.records import CacheRecord

log = logging.getLogger("cache_aside")

Fetcher = Callable[[ResourceDescriptor], Awaitable[Optional[dict]]]


class CacheAside:
    def __init__(
        self,
        gateway: StorageGateway,
        policy: FreshnessPolicy,
        fetchers: dict[ResourceType, Fetcher],
        mappers: Optional[dict] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._gateway  = gateway
        self._policy   = policy
        self._fetchers = fetchers
        self._mappers  = MAPPERS if mappers is None else mappers
        self._clock    = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    # ── Per-key in-flight guard ───────────────────────────────────────────────

    async def lookup(self, descriptor: ResourceDescriptor) -> list[CacheRecord]:
        key  = descriptor.cache_key
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._waiters[key] = self._waiters.get(key, 0) + 1
        try:
            async with lock:
                return await self._lookup(descriptor)
        finally:
            self._waiters[key] -= 1
            if self._waiters[key] == 0:
                del self._waiters[key]
                del self._locks[key]

    def in_flight(self) -> list[str]:
        """Cache keys with a lookup currently running or queued."""
        return sorted(self._locks)

    # ── State machine ─────────────────────────────────────────────────────────

    async def _lookup(self, descriptor: ResourceDescriptor) -> list[CacheRecord]:
        key = descriptor.cache_key

        # CHECKING_CACHE
        cached  = await self._gateway.read(descriptor)
        verdict = await self._policy.evaluate(descriptor, cached)
        if isinstance(verdict, Fresh):
            log.info(f"HIT {key} ({len(verdict.records)} rows)")
            return verdict.records
        log.info(f"{'STALE' if cached else 'MISS'} {key} — fetching upstream")

        # FETCHING
        if descriptor.resource_type is not ResourceType.LOCATION:
            if not await self._gateway.location_exists(descriptor.location_id):
                raise NoDataError(descriptor.resource_type.value, f"unknown location_id {descriptor.location_id}")
        fetch = self._fetchers.get(descriptor.resource_type)
        mapper = self._mappers.get(descriptor.resource_type)
        if fetch is None or mapper is None:
            raise ConfigurationError(f"No upstream fetcher/mapper for '{descriptor.resource_type.value}'")
        body = await fetch(descriptor)
        if not body:
            raise NoDataError(descriptor.resource_type.value)

        # MAPPING
        records = mapper(descriptor, body, self._clock)
        log.debug(f"{key}: mapped {len(records)} records")

        # PERSISTING
        stored = []
        try:
            for record in records:
                stored.append(await self._gateway.write(descriptor, record))
        except StorageError:
            if stored:
                await self._discard_partial(descriptor, len(stored))
            raise
        log.info(f"Cached {len(stored)} {descriptor.resource_type.value} rows for {key}")

        # RESPONDING
        return stored

    async def _discard_partial(self, descriptor: ResourceDescriptor, written: int) -> None:
        """Remove the rows of a generation whose persist failed part-way."""
        try:
            await self._gateway.delete(descriptor)
            log.warning(f"Discarded {written} partially written rows for {descriptor.cache_key}")
        except StorageError as ex:
            log.error(f"Could not discard partial rows for {descriptor.cache_key}: {ex}")
