"""
FastAPI entrypoint.

This file only binds UI actions to the client core:
- routing
- mapping tagged outcomes to HTTP responses
- wiring one HttpClient / store / lookup / sync service per app
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI, Query
from fastapi.responses import JSONResponse

from .diagnostics import DiagnosticsReporter
from .errors import Outcome, attempt
from .http_client import HttpClient
from .logging_config import setup_logging
from .schemas import LocationDraft, LocationUpdate, SavedLocation
from .settings import Settings, settings as default_settings
from .store import LocationStore
from .sync import LocationSyncService
from .weather_lookup import WeatherLookup, draft_from_snapshot

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    "validation": 400,
    "not_found": 404,
    "duplicate_id": 409,
    "remote": 502,
    "network": 502,
    "parse": 502,
}


def error_response(outcome: Outcome) -> JSONResponse:
    """Convert a failed outcome into a JSON error body."""
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(outcome.kind, 500),
        content={"error": outcome.kind, "detail": outcome.error.message, "status": outcome.status},
    )


def location_to_dict(record: SavedLocation) -> Dict[str, Any]:
    return record.model_dump()


def create_app(settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None) -> FastAPI:
    cfg = settings or default_settings
    setup_logging(cfg.log_level)

    http = HttpClient(timeout_s=cfg.http_timeout_s, transport=transport)
    store = LocationStore()
    lookup = WeatherLookup(http, cfg.openweather_api_key, cfg.weather_api_url, units=cfg.units)
    sync = LocationSyncService(http, store, cfg.locations_api_url, refresh_limit=cfg.refresh_limit)
    reporter = DiagnosticsReporter()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Initial load; the app still starts with an empty list on failure
        outcome = await attempt(sync.refresh_all())
        if not outcome.ok:
            logger.warning("Initial load of saved locations failed: %s", outcome.error)
        yield

    app = FastAPI(title=cfg.app_name, lifespan=lifespan)
    app.state.http = http
    app.state.store = store
    app.state.lookup = lookup
    app.state.sync = sync
    app.state.reporter = reporter

    # -------------------------
    # Weather
    # -------------------------

    @app.get("/api/weather")
    async def api_weather(q: str = Query("", max_length=255)):
        """Current weather for a city, plus a pre-filled save draft."""
        outcome = await attempt(lookup.fetch_weather(q))
        if not outcome.ok:
            return error_response(outcome)
        snapshot = outcome.value
        return {"snapshot": snapshot.model_dump(), "draft": draft_from_snapshot(snapshot).model_dump()}

    # -------------------------
    # Saved locations
    # -------------------------

    @app.get("/api/locations")
    def api_list_locations():
        return [location_to_dict(r) for r in store.all()]

    @app.post("/api/locations/refresh")
    async def api_refresh_locations(limit: Optional[int] = None):
        outcome = await attempt(sync.refresh_all(limit))
        if not outcome.ok:
            return error_response(outcome)
        return [location_to_dict(r) for r in outcome.value]

    @app.post("/api/locations")
    async def api_create_location(draft: LocationDraft):
        outcome = await attempt(sync.create(draft))
        if not outcome.ok:
            return error_response(outcome)
        return location_to_dict(outcome.value)

    @app.put("/api/locations/{location_id}")
    async def api_update_location(location_id: int, changes: LocationUpdate):
        outcome = await attempt(sync.update(location_id, changes))
        if not outcome.ok:
            return error_response(outcome)
        return location_to_dict(outcome.value)

    @app.delete("/api/locations/{location_id}")
    async def api_delete_location(location_id: int, confirm: bool = False):
        """Delete a location. `confirm=true` carries the user's confirmation."""
        if not confirm:
            return JSONResponse(
                status_code=400,
                content={"error": "validation", "detail": "Deletion must be confirmed", "status": None},
            )
        outcome = await attempt(sync.delete(location_id))
        if not outcome.ok:
            return error_response(outcome)
        return {"ok": True}

    # -------------------------
    # Diagnostics
    # -------------------------

    @app.get("/api/diagnostics")
    def api_diagnostics():
        return {"text": reporter.render(http.trace), "trace": reporter.as_dict(http.trace)}

    return app


app = create_app()
