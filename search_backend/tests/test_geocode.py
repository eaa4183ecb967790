import asyncio

import httpx

from search_backend.geocoding.config import GeocodingConfig
from search_backend.geocoding.geocode import (
    Coordinates,
    NominatimGeocoder,
    geocode_restaurants,
)
from search_backend.store.memory import InMemoryRecordStore

CONFIG = GeocodingConfig(base_url="https://geo.test/search")


def _store():
    return InMemoryRecordStore({
        "users": {
            "r1": {"role": "hotel", "restaurantName": "Sushi Bay", "location": "Kilimani"},
            "r2": {"role": "restaurant", "location": "Westlands", "coords": {"lat": 1.0, "lng": 2.0}},
            "r3": {"role": "restaurant", "location": "Atlantis"},
            "r4": {"role": "hotel", "location": ""},
            "d1": {"role": "diner", "location": "Karen"},
        }
    })


def _handler(request: httpx.Request) -> httpx.Response:
    query = request.url.params["q"]
    if query == "Kilimani":
        return httpx.Response(200, json=[{"lat": "-1.29", "lon": "36.78"}])
    if query == "Blocked":
        return httpx.Response(429)
    return httpx.Response(200, json=[])


def _run(store, handler=_handler):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            geocoder = NominatimGeocoder(client, CONFIG)
            return await geocode_restaurants(store, geocoder, CONFIG, sleep=fake_sleep)

    return asyncio.run(_go()), delays


def test_geocoder_returns_first_result():
    async def _go():
        async with httpx.AsyncClient(transport=httpx.MockTransport(_handler)) as client:
            return await NominatimGeocoder(client, CONFIG).geocode("Kilimani")

    assert asyncio.run(_go()) == Coordinates(lat=-1.29, lng=36.78)


def test_geocode_restaurants_updates_missing_coords():
    store = _store()
    summary, delays = _run(store)

    users = {doc.id: doc.fields for doc in asyncio.run(store.get("users"))}
    assert users["r1"]["coords"] == {"lat": -1.29, "lng": 36.78}
    assert users["r2"]["coords"] == {"lat": 1.0, "lng": 2.0}
    assert "coords" not in users["r3"]
    assert "coords" not in users["d1"]

    assert summary.geocoded == 1
    assert summary.skipped == 2
    assert summary.not_found == 1
    assert delays == [CONFIG.rate_limit_delay, CONFIG.rate_limit_delay]


def test_blocked_response_backs_off():
    store = InMemoryRecordStore({"users": {"r1": {"role": "hotel", "location": "Blocked"}}})
    summary, delays = _run(store)

    assert summary.failed == 1
    assert delays == [CONFIG.backoff_delay]


def test_transport_error_backs_off():
    def _boom(request):
        raise httpx.ConnectError("no route")

    store = InMemoryRecordStore({"users": {"r1": {"role": "hotel", "location": "Kilimani"}}})
    summary, delays = _run(store, _boom)

    assert summary.failed == 1
    assert delays == [CONFIG.backoff_delay]
