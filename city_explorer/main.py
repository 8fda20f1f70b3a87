"""
city_explorer/main.py  — City Explorer Backend
Startup: validates cache timeouts, opens the store, wires the cache-aside
layer.  Every data endpoint reads through the store and only calls upstream
on a miss or an expired generation.
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse

from city_explorer.core.config import DATABASE_PATH, PORT, RESOURCE_TIMEOUTS, validate_timeouts
from city_explorer.core.database import Database
from city_explorer.core.descriptor import ResourceType
from city_explorer.core.errors import CacheError
from city_explorer.core.freshness import FreshnessPolicy
from city_explorer.core.gateway import StorageGateway
from city_explorer.core.http_client import close_all
from city_explorer.core.orchestrator import CacheAside, Fetcher
from city_explorer.routers import events, location, weather
from city_explorer.upstream.events import fetch_events
from city_explorer.upstream.geocode import fetch_geocode
from city_explorer.upstream.weather import fetch_forecast

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("main")

GENERIC_ERROR = "Sorry, something went wrong"

FETCHERS: dict[ResourceType, Fetcher] = {
    ResourceType.LOCATION: fetch_geocode,
    ResourceType.WEATHER:  fetch_forecast,
    ResourceType.EVENT:    fetch_events,
}


def create_app(
    database_path: Optional[str] = None,
    fetchers: Optional[dict[ResourceType, Fetcher]] = None,
    clock: Callable[[], float] = time.time,
) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        log.info("🚀 City Explorer Backend starting...")
        validate_timeouts()
        db = Database(database_path or DATABASE_PATH)
        await db.open()
        gateway = StorageGateway(db)
        app.state.db    = db
        app.state.cache = CacheAside(
            gateway,
            FreshnessPolicy(gateway, clock=clock),
            fetchers or FETCHERS,
            clock=clock,
        )
        yield
        log.info("🛑 Shutting down...")
        await db.close()
        await close_all()

    app = FastAPI(
        title="City Explorer Backend",
        description=(
            "Cache-aside location backend. "
            "Sources: Google Geocoding (location), Dark Sky (weather), Eventbrite (events). "
            "Responses are served from the store until their resource timeout expires."
        ),
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.exception_handler(CacheError)
    async def cache_error_handler(request: Request, exc: CacheError):
        # Full detail stays server-side; callers only get the generic message
        log.error(f"{request.url.path} failed: {type(exc).__name__}: {exc}", exc_info=exc)
        return PlainTextResponse(GENERIC_ERROR, status_code=500)

    # ── Routers ──────────────────────────────────────────────────────────────
    app.include_router(location.router)
    app.include_router(weather.router)
    app.include_router(events.router)

    @app.get("/", tags=["meta"])
    async def root():
        return {
            "status":  "online",
            "version": "1.0.0",
            "endpoints": {
                "location": "/location?data={search}",
                "weather":  "/weather?id={location_id}&latitude={lat}&longitude={lng}",
                "events":   "/events?id={location_id}&formatted_query={address}",
                "health":   "/health",
                "docs":     "/docs",
            },
        }

    @app.get("/health", tags=["meta"])
    async def health(request: Request):
        """Store connectivity plus the cache timeout table."""
        db: Database = request.app.state.db
        store_ok = await db.ping()
        return {
            "status":    "healthy" if store_ok else "degraded",
            "store":     {"path": db.path, "ready": store_ok},
            "timeouts_s": {rt.value: t for rt, t in RESOURCE_TIMEOUTS.items()},
            "in_flight": request.app.state.cache.in_flight(),
        }

    return app


app = create_app()


def run() -> None:
    import uvicorn

    uvicorn.run("city_explorer.main:app", host="0.0.0.0", port=PORT)
