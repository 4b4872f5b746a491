"""
Test configuration and fixtures.

Both remote services are faked with httpx.MockTransport, so no test touches
the network.
"""
import json

import httpx
import pytest

from weather_locations.http_client import HttpClient
from weather_locations.settings import Settings
from weather_locations.store import LocationStore
from weather_locations.sync import LocationSyncService
from weather_locations.weather_lookup import WeatherLookup

WEATHER_URL = "https://weather.test/data/2.5/weather"
LOCATIONS_URL = "https://locations.test/posts"
API_KEY = "secret-key-123"

LONDON = {
    "name": "London",
    "sys": {"country": "GB"},
    "weather": [{"main": "Clouds", "description": "overcast clouds"}],
    "main": {"temp": 15.2, "feels_like": 14.8, "humidity": 72},
    "wind": {"speed": 3.1},
}


class FakeWeatherProvider:
    """Knows London only; anything else is a 404 with a provider message."""

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if request.url.params.get("q") == "London":
            return httpx.Response(200, json=LONDON)
        return httpx.Response(404, json={"cod": "404", "message": "city not found"})


class FakeLocationsBackend:
    """
    In-memory stand-in for the placeholder REST collection.

    `fail_with` forces the next responses to a given status,
    `requests` records (method, path) for every call.
    """

    def __init__(self):
        self.items = {}
        self.next_id = 1
        self.fail_with = None
        self.requests = []

    def seed(self, **fields):
        item = {"id": self.next_id, **fields}
        self.items[self.next_id] = item
        self.next_id += 1
        return item

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append((request.method, request.url.path))
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, json={})

        parts = request.url.path.strip("/").split("/")
        item_id = int(parts[1]) if len(parts) > 1 else None

        if request.method == "GET" and item_id is None:
            items = list(self.items.values())
            limit = request.url.params.get("_limit")
            if limit is not None:
                items = items[: int(limit)]
            return httpx.Response(200, json=items)

        if request.method == "POST":
            body = json.loads(request.content)
            item = {**body, "id": self.next_id}
            self.items[self.next_id] = item
            self.next_id += 1
            return httpx.Response(201, json=item)

        if item_id not in self.items:
            return httpx.Response(404, json={})

        if request.method == "PUT":
            body = json.loads(request.content)
            self.items[item_id] = {**body, "id": item_id}
            return httpx.Response(200, json=self.items[item_id])

        if request.method == "DELETE":
            del self.items[item_id]
            return httpx.Response(200, json={})

        return httpx.Response(405, json={})


@pytest.fixture
def weather_provider():
    return FakeWeatherProvider()


@pytest.fixture
def backend():
    return FakeLocationsBackend()


@pytest.fixture
def transport(weather_provider, backend):
    def route(request: httpx.Request) -> httpx.Response:
        if request.url.host == "weather.test":
            return weather_provider(request)
        return backend(request)

    return httpx.MockTransport(route)


@pytest.fixture
def http(transport):
    return HttpClient(transport=transport)


@pytest.fixture
def store():
    return LocationStore()


@pytest.fixture
def sync(http, store):
    return LocationSyncService(http, store, LOCATIONS_URL)


@pytest.fixture
def lookup(http):
    return WeatherLookup(http, API_KEY, WEATHER_URL)


@pytest.fixture
def test_settings():
    return Settings(
        openweather_api_key=API_KEY,
        weather_api_url=WEATHER_URL,
        locations_api_url=LOCATIONS_URL,
        _env_file=None,
    )
