"""
city_explorer/core/http_client.py
Shared async httpx client for every upstream API.
  • plain_client() → lazily created, reused across requests
  • fetch_json()   → GET + parse, None on any non-200 or transport failure
  • close_all()    → called from the app lifespan on shutdown
"""

import logging
from typing import Optional

import httpx

log = logging.getLogger("http_client")

_plain_client: httpx.AsyncClient | None = None

_LIMITS  = httpx.Limits(max_connections=10, max_keepalive_connections=5)
_TIMEOUT = httpx.Timeout(30.0, connect=15.0)


def plain_client() -> httpx.AsyncClient:
    global _plain_client
    if _plain_client is None or _plain_client.is_closed:
        _plain_client = httpx.AsyncClient(
            timeout=_TIMEOUT,
            follow_redirects=True,
            limits=_LIMITS,
        )
    return _plain_client


async def fetch_json(
    url: str,
    params: Optional[dict] = None,
    source: str = "upstream",
    client: Optional[httpx.AsyncClient] = None,
) -> Optional[dict]:
    """GET url and return parsed JSON, or None (logged) on failure."""
    client = client or plain_client()
    try:
        resp = await client.get(url, params=params)
        if resp.status_code != 200:
            log.warning(f"{source} HTTP {resp.status_code}")
            return None
        body = resp.json()
        if not isinstance(body, dict):
            log.warning(f"{source} returned {type(body).__name__}, expected an object")
            return None
        return body
    except (httpx.HTTPError, ValueError) as ex:
        log.warning(f"{source} request failed: {ex}")
        return None


async def close_all() -> None:
    global _plain_client
    if _plain_client and not _plain_client.is_closed:
        await _plain_client.aclose()
    _plain_client = None
