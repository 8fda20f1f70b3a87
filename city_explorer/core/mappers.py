"""
city_explorer/core/mappers.py
═══════════════════════════════════════════════════════════════════════════════
Upstream JSON → cache records.  Pure: no I/O, created_at = clock() at the
moment of mapping.

  Google geocode   {"results": [{formatted_address, geometry.location}]}
  Dark Sky         {"daily": {"data": [{summary, time}]}}
  Eventbrite       {"events": [{url, name.text, start.local, summary}]}

Missing body or zero usable entries → NoDataError (never an empty success).
═══════════════════════════════════════════════════════════════════════════════
"""

import time
from datetime import datetime, timezone
from typing import Callable, Optional

from city_explorer.core.config import DISPLAY_TZ
from city_explorer.core.descriptor import ResourceDescriptor, ResourceType
from city_explorer.core.errors import NoDataError
from city_explorer.core.records import CacheRecord, Event, Location, Weather

Clock = Callable[[], float]

# "Mon Jan 01 2024"
_DATE_FMT = "%a %b %d %Y"


# ── Helpers ───────────────────────────────────────────────────────────────────

def _as_object(body) -> dict:
    return body if isinstance(body, dict) else {}


def _entries(value) -> list[dict]:
    """Object entries of a JSON array; anything else counts as no entries."""
    if not isinstance(value, list):
        return []
    return [e for e in value if isinstance(e, dict)]


def _display_date_from_ts(ts: Optional[float]) -> str:
    if ts is None:
        return ""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc).astimezone(DISPLAY_TZ)
    return dt.strftime(_DATE_FMT)


def _display_date_from_local(local: Optional[str]) -> str:
    """'2024-03-16T19:00:00' (venue-local, no tz) → 'Sat Mar 16 2024'"""
    if not local:
        return ""
    try:
        return datetime.fromisoformat(local).strftime(_DATE_FMT)
    except ValueError:
        return local


# ── Per-type mappers ──────────────────────────────────────────────────────────

def map_location(search_query: str, body: Optional[dict], clock: Clock = time.time) -> Location:
    results = _entries(_as_object(body).get("results"))
    if not results:
        raise NoDataError(ResourceType.LOCATION.value, f"no geocode match for '{search_query}'")

    first = results[0]
    point = _as_object(_as_object(first.get("geometry")).get("location"))
    if "lat" not in point or "lng" not in point:
        raise NoDataError(ResourceType.LOCATION.value, "geocode match has no coordinates")

    return Location(
        search_query=search_query,
        formatted_query=first.get("formatted_address", ""),
        latitude=float(point["lat"]),
        longitude=float(point["lng"]),
        created_at=clock(),
    )


def map_weather(location_id: int, body: Optional[dict], clock: Clock = time.time) -> list[Weather]:
    days = _entries(_as_object(_as_object(body).get("daily")).get("data"))
    if not days:
        raise NoDataError(ResourceType.WEATHER.value, "forecast has no daily entries")

    created_at = clock()
    return [
        Weather(
            forecast=day.get("summary", ""),
            time=_display_date_from_ts(day.get("time")),
            created_at=created_at,
            location_id=location_id,
        )
        for day in days
    ]


def map_events(location_id: int, body: Optional[dict], clock: Clock = time.time) -> list[Event]:
    events = _entries(_as_object(body).get("events"))
    if not events:
        raise NoDataError(ResourceType.EVENT.value, "no events found")

    created_at = clock()
    out = []
    for ev in events:
        out.append(Event(
            link=ev.get("url", ""),
            name=_as_object(ev.get("name")).get("text", ""),
            event_date=_display_date_from_local(_as_object(ev.get("start")).get("local")),
            summary=ev.get("summary") or "",
            created_at=created_at,
            location_id=location_id,
        ))
    return out


# ── Registry: uniform (descriptor, body, clock) → [records] ──────────────────

MAPPERS: dict[ResourceType, Callable[..., list[CacheRecord]]] = {
    ResourceType.LOCATION: lambda d, body, clock=time.time: [map_location(d.search_query, body, clock)],
    ResourceType.WEATHER:  lambda d, body, clock=time.time: map_weather(d.location_id, body, clock),
    ResourceType.EVENT:    lambda d, body, clock=time.time: map_events(d.location_id, body, clock),
}
