"""
city_explorer/core/config.py  ── City Explorer Backend
═══════════════════════════════════════════════════════════════════════════════
UPSTREAM ASSIGNMENT:

  Google Geocoding   →  location  (search query → formatted address + lat/lng)
  Dark Sky forecast  →  weather   (daily summaries for a lat/lng)
  Eventbrite search  →  event     (events near a formatted address)

CACHE TIMEOUTS:

  Every resource type has an entry in RESOURCE_TIMEOUTS.  None means the
  rows never expire (locations: their ids are referenced by every other
  table).  A missing entry is a ConfigurationError, raised at startup by
  validate_timeouts().
═══════════════════════════════════════════════════════════════════════════════
"""

import logging
import os
from typing import Optional

import pytz

from city_explorer.core.descriptor import ResourceType
from city_explorer.core.errors import ConfigurationError

log = logging.getLogger("config")

# ── Server / store ────────────────────────────────────────────────────────────
PORT          = int(os.environ.get("PORT", "3000"))
DATABASE_PATH = os.environ.get("DATABASE_PATH", "city_explorer.db")

# Rendered weather / event dates use this zone
DISPLAY_TZ = pytz.timezone(os.environ.get("DISPLAY_TZ", "UTC"))

# ── Upstream APIs ─────────────────────────────────────────────────────────────
# SECURITY: keys come from the environment only, never hardcoded.
GEOCODE_API_KEY    = os.environ.get("GEOCODE_API_KEY", "")
WEATHER_API_KEY    = os.environ.get("WEATHER_API_KEY", "")
EVENTBRITE_API_KEY = os.environ.get("EVENTBRITE_API_KEY", "")

for _name, _value in (
    ("GEOCODE_API_KEY", GEOCODE_API_KEY),
    ("WEATHER_API_KEY", WEATHER_API_KEY),
    ("EVENTBRITE_API_KEY", EVENTBRITE_API_KEY),
):
    if not _value:
        log.warning(f"{_name} env var not set — upstream requests will be rejected")

GEOCODE_BASE = os.environ.get("GEOCODE_BASE", "https://maps.googleapis.com/maps/api/geocode/json")
WEATHER_BASE = os.environ.get("WEATHER_BASE", "https://api.darksky.net/forecast")
EVENTS_BASE  = os.environ.get("EVENTS_BASE", "https://www.eventbriteapi.com/v3/events/search")

# ── Cache timeouts (seconds) ──────────────────────────────────────────────────
# Changing these needs a redeploy; they are not runtime-configurable.
RESOURCE_TIMEOUTS: dict[ResourceType, Optional[float]] = {
    ResourceType.LOCATION: None,             # never expires
    ResourceType.WEATHER:  15,               # 15 seconds
    ResourceType.EVENT:    6 * 60 * 60,      # 6 hours
}


def validate_timeouts(timeouts: Optional[dict] = None) -> None:
    """Fail fast if any resource type lacks a timeout entry."""
    table = RESOURCE_TIMEOUTS if timeouts is None else timeouts
    missing = [rt.value for rt in ResourceType if rt not in table]
    if missing:
        raise ConfigurationError(f"No cache timeout configured for: {', '.join(missing)}")
    for rt, seconds in table.items():
        if seconds is not None and seconds < 0:
            raise ConfigurationError(f"Negative cache timeout for {rt.value}: {seconds}")
