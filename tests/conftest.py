"""
Pytest configuration and fixtures for the cache-aside layer.
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from city_explorer.core.database import Database
from city_explorer.core.descriptor import ResourceType
from city_explorer.core.freshness import FreshnessPolicy
from city_explorer.core.gateway import StorageGateway
from city_explorer.core.orchestrator import CacheAside


GEOCODE_SEATTLE = {
    "status": "OK",
    "results": [
        {
            "formatted_address": "Seattle, WA, USA",
            "geometry": {"location": {"lat": 47.6062095, "lng": -122.3320708}},
        }
    ],
}

FORECAST = {
    "daily": {
        "data": [
            {"summary": "Light rain in the morning.", "time": 1700000000},
            {"summary": "Partly cloudy throughout the day.", "time": 1700086400},
        ]
    }
}

EVENTS = {
    "events": [
        {
            "url": "https://www.eventbrite.com/e/1",
            "name": {"text": "Harbor Night Market"},
            "start": {"local": "2024-03-16T19:00:00"},
            "summary": "Food stalls by the water",
        },
        {
            "url": "https://www.eventbrite.com/e/2",
            "name": {"text": "Jazz in the Park"},
            "start": {"local": "2024-03-17T14:30:00"},
            "summary": None,
        },
    ]
}


class FakeClock:
    """Callable clock pinned to a fixed time."""

    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
async def db(tmp_path: Path) -> Database:
    """Open a throwaway SQLite store with every table created."""
    database = Database(tmp_path / "cache.db")
    await database.open()
    yield database
    await database.close()


@pytest.fixture
def gateway(db: Database) -> StorageGateway:
    return StorageGateway(db)


@pytest.fixture
def policy(gateway: StorageGateway, clock: FakeClock) -> FreshnessPolicy:
    return FreshnessPolicy(gateway, clock=clock)


@pytest.fixture
def fetchers() -> dict[ResourceType, AsyncMock]:
    """Upstream collaborators returning canned bodies."""
    return {
        ResourceType.LOCATION: AsyncMock(return_value=GEOCODE_SEATTLE),
        ResourceType.WEATHER:  AsyncMock(return_value=FORECAST),
        ResourceType.EVENT:    AsyncMock(return_value=EVENTS),
    }


@pytest.fixture
def cache(
    gateway: StorageGateway,
    policy: FreshnessPolicy,
    fetchers: dict[ResourceType, AsyncMock],
    clock: FakeClock,
) -> CacheAside:
    return CacheAside(gateway, policy, fetchers, clock=clock)
