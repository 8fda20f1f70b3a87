"""
city_explorer/core/freshness.py
═══════════════════════════════════════════════════════════════════════════════
Decides whether a cached generation is still usable.

  no rows                    → Empty   (no deletion)
  age <= timeout (or None)   → Fresh(records)
  age >  timeout             → delete every row for the key, then Stale

Only records[0].created_at is consulted: rows sharing a key (e.g. 8 daily
weather rows for one location) are one generation with one age.
Eviction is eager; a failed delete is logged and the request carries on.
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Union

from city_explorer.core.config import RESOURCE_TIMEOUTS
from city_explorer.core.descriptor import ResourceDescriptor, ResourceType
from city_explorer.core.errors import ConfigurationError, StorageError
from city_explorer.core.gateway import StorageGateway
from city_explorer.core.records import CacheRecord

log = logging.getLogger("freshness")


@dataclass
class Fresh:
    records: list = field(default_factory=list)


@dataclass
class Stale:
    pass


@dataclass
class Empty:
    pass


Verdict = Union[Fresh, Stale, Empty]


class FreshnessPolicy:
    def __init__(
        self,
        gateway: StorageGateway,
        timeouts: Optional[dict[ResourceType, Optional[float]]] = None,
        clock: Callable[[], float] = time.time,
    ):
        self._gateway  = gateway
        self._timeouts = RESOURCE_TIMEOUTS if timeouts is None else timeouts
        self._clock    = clock

    def timeout_for(self, resource_type: ResourceType) -> Optional[float]:
        if resource_type not in self._timeouts:
            raise ConfigurationError(f"No cache timeout configured for '{resource_type.value}'")
        return self._timeouts[resource_type]

    async def evaluate(self, descriptor: ResourceDescriptor, records: list[CacheRecord]) -> Verdict:
        timeout = self.timeout_for(descriptor.resource_type)
        if not records:
            return Empty()

        age = self._clock() - records[0].created_at
        log.debug(f"{descriptor.cache_key} age={age:.1f}s timeout={timeout}")

        if timeout is None or age <= timeout:
            return Fresh(records)

        try:
            deleted = await self._gateway.delete(descriptor)
            log.info(f"Evicted {deleted} stale {descriptor.resource_type.value} rows for {descriptor.cache_key}")
        except StorageError as ex:
            log.error(f"Eviction failed for {descriptor.cache_key}: {ex}")
            log.warning(f"{len(records)} stale rows remain for {descriptor.cache_key}")
        return Stale()
