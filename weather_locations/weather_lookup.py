"""
Current-weather lookup against OpenWeatherMap.

Endpoint used:
    /data/2.5/weather?q=<city>&units=metric&appid=KEY

Lookups never touch the saved-locations store. Only the most recently
started lookup is kept for display; an older one that finishes later still
returns its snapshot to its caller but does not overwrite `current`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .errors import LocationsError, ParseError, RemoteError, ValidationError
from .http_client import HttpClient
from .schemas import LocationDraft, WeatherSnapshot

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to fetch weather data"


def snapshot_from_payload(data: Dict[str, Any]) -> WeatherSnapshot:
    """
    Map the provider's JSON into a WeatherSnapshot field by field.
    """
    try:
        condition = (data.get("weather") or [])[0]
        return WeatherSnapshot(
            city_name=data["name"],
            country_code=data["sys"]["country"],
            condition_main=condition["main"],
            condition_description=condition["description"],
            temperature_c=float(data["main"]["temp"]),
            feels_like_c=float(data["main"]["feels_like"]),
            humidity_pct=float(data["main"]["humidity"]),
            wind_speed=float(data["wind"]["speed"]),
        )
    except (KeyError, IndexError, TypeError, ValueError, AttributeError) as e:
        raise ParseError(f"Unexpected weather payload: missing or invalid {e}") from e


def draft_from_snapshot(snapshot: WeatherSnapshot) -> LocationDraft:
    """Pre-fill a saved-location draft from a lookup ("save this location")."""
    return LocationDraft(
        name=f"Weather in {snapshot.city_name}",
        city=snapshot.city_name,
        country=snapshot.country_code,
        notes=f"Temp: {snapshot.temperature_c}°C, Weather: {snapshot.condition_description}",
    )


class WeatherLookup:

    def __init__(self, http: HttpClient, api_key: str, base_url: str, units: str = "metric"):
        self.http = http
        self.api_key = api_key
        self.base_url = base_url
        self.units = units
        self.current: Optional[WeatherSnapshot] = None
        self.current_error: Optional[LocationsError] = None
        self._generation = 0

    def clear(self) -> None:
        """Drop the displayed result (e.g. when the user leaves the tab)."""
        self._generation += 1
        self.current = None
        self.current_error = None

    async def fetch_weather(self, city_name: str) -> WeatherSnapshot:
        """
        Look up current conditions for a city.

        Raises:
            ValidationError: blank city name (no request is made)
            RemoteError: provider answered non-2xx
            NetworkError / ParseError: from the HTTP layer or a malformed payload
        """
        city = (city_name or "").strip()
        if not city:
            raise ValidationError("Please enter a city name")

        self._generation += 1
        generation = self._generation

        try:
            snapshot = await self._fetch(city)
        except LocationsError as e:
            logger.warning("Weather lookup for %r failed: %s", city, e)
            if generation == self._generation:
                self.current = None
                self.current_error = e
            raise

        if generation == self._generation:
            self.current = snapshot
            self.current_error = None
        else:
            logger.debug("Weather lookup for %r superseded, not displayed", city)
        return snapshot

    async def _fetch(self, city: str) -> WeatherSnapshot:
        params = {"q": city, "units": self.units, "appid": self.api_key}
        r = await self.http.request("GET", self.base_url, params=params)

        if not r.ok:
            message = r.data.get("message") if isinstance(r.data, dict) else None
            raise RemoteError(r.status, message or DEFAULT_ERROR_MESSAGE)

        if not isinstance(r.data, dict):
            raise ParseError("Weather response is not a JSON object")
        return snapshot_from_payload(r.data)
