"""
city_explorer/upstream/geocode.py
Google Geocoding API — resolves a free-text search into a formatted
address and coordinates.

Endpoint:
  GET {GEOCODE_BASE}?address={query}&key={GEOCODE_API_KEY}
  → {"status": "OK", "results": [{formatted_address, geometry.location}]}
"""

import logging
from typing import Optional

import httpx

from city_explorer.core.config import GEOCODE_API_KEY, GEOCODE_BASE
from city_explorer.core.descriptor import ResourceDescriptor
from city_explorer.core.http_client import fetch_json

log = logging.getLogger("geocode")


async def fetch_geocode(
    descriptor: ResourceDescriptor,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict]:
    query = descriptor.search_query
    log.info(f"Geocoding '{query}'")
    data = await fetch_json(
        GEOCODE_BASE,
        params={"address": query, "key": GEOCODE_API_KEY},
        source="geocode",
        client=client,
    )
    if data and data.get("status") not in (None, "OK"):
        log.warning(f"Geocode status {data.get('status')} for '{query}'")
    return data
