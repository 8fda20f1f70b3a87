"""
city_explorer/upstream/events.py
Eventbrite event search — events near a formatted address.

Endpoint:
  GET {EVENTS_BASE}?token={EVENTBRITE_API_KEY}&location.address={formatted_query}
  → {"events": [{url, name: {text}, start: {local}, summary}, ...]}
"""

import logging
from typing import Optional

import httpx

from city_explorer.core.config import EVENTBRITE_API_KEY, EVENTS_BASE
from city_explorer.core.descriptor import ResourceDescriptor
from city_explorer.core.http_client import fetch_json

log = logging.getLogger("events")


async def fetch_events(
    descriptor: ResourceDescriptor,
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict]:
    if not descriptor.formatted_query:
        log.warning(f"No address for {descriptor.cache_key} — cannot search events")
        return None
    return await fetch_json(
        EVENTS_BASE,
        params={"token": EVENTBRITE_API_KEY, "location.address": descriptor.formatted_query},
        source="events",
        client=client,
    )
