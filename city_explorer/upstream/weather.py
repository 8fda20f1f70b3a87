"""
city_explorer/upstream/weather.py
Dark Sky style forecast API — daily summaries for a coordinate pair.

Endpoint:
  GET {WEATHER_BASE}/{WEATHER_API_KEY}/{lat},{lng}
  → {"daily": {"data": [{"summary": "...", "time": 1700000000}, ...]}}
"""

import logging
from typing import Optional

import httpx

from city_explorer.core.config import WEATHER_API_KEY, WEATHER_BASE
from city_explorer.core.descriptor import ResourceDescriptor
from city_explorer.core.http_client import fetch_json

log = logging.getLogger("weather")


async def fetch_forecast(
    descriptor: ResourceDescriptor,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict]:
    if descriptor.latitude is None or descriptor.longitude is None:
        log.warning(f"No coordinates for {descriptor.cache_key} — cannot fetch forecast")
        return None
    url = f"{WEATHER_BASE}/{WEATHER_API_KEY}/{descriptor.latitude},{descriptor.longitude}"
    return await fetch_json(url, source="weather", client=client)
