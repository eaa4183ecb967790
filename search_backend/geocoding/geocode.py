"""
Batch script that geocodes restaurant locations.

Usage:
    python -m search_backend.geocoding.geocode
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass

import httpx
from pydantic import BaseModel

from ..errors import StoreError, TransientUpstreamError
from ..indexing.config import DEFAULT_INDEX_CONFIG
from ..store.base import RecordStore
from ..store.config import DEFAULT_STORE_CONFIG
from ..store.firestore import FirestoreRecordStore
from ..store.records import RawRecord, UserFields
from .config import DEFAULT_GEOCODING_CONFIG, GeocodingConfig

logger = logging.getLogger(__name__)


class GeocodingBlockedError(TransientUpstreamError):
    """Nominatim answered with a non-2xx status."""

    def __init__(self, status_code: int) -> None:
        super().__init__(f"Nominatim responded with HTTP {status_code}")
        self.status_code = status_code


class Coordinates(BaseModel):
    lat: float
    lng: float


@dataclass
class GeocodeSummary:
    geocoded: int = 0
    skipped: int = 0
    not_found: int = 0
    failed: int = 0


class NominatimGeocoder:
    def __init__(self, client: httpx.AsyncClient, config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG) -> None:
        self._client = client
        self._config = config

    async def geocode(self, address: str) -> Coordinates | None:
        """Return the first match for ``address``, or None when Nominatim finds nothing."""
        response = await self._client.get(
            self._config.base_url,
            params={"format": "json", "q": address},
            headers={"User-Agent": self._config.user_agent, "Accept-Language": "en"},
        )
        if not response.is_success:
            raise GeocodingBlockedError(response.status_code)

        results = response.json()
        if not results:
            return None
        return Coordinates(lat=float(results[0]["lat"]), lng=float(results[0]["lon"]))


def _has_coords(user: UserFields) -> bool:
    coords = user.coords or {}
    return bool(coords.get("lat") and coords.get("lng"))


async def geocode_restaurants(
    store: RecordStore,
    geocoder: NominatimGeocoder,
    config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG,
    roles: Iterable[str] = DEFAULT_INDEX_CONFIG.eligible_roles,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> GeocodeSummary:
    """
    Geocode every restaurant user that has a location but no coordinates.

    Waits ``rate_limit_delay`` after each lookup and ``backoff_delay``
    after a blocked or failed one.
    """
    eligible = {r.lower() for r in roles}
    summary = GeocodeSummary()

    for doc in await store.get("users"):
        record = RawRecord.from_document("users", doc)
        if record is None:
            continue
        user = record.typed(UserFields)
        if user.role.strip().lower() not in eligible:
            continue
        if not user.location or _has_coords(user):
            logger.info("Skipping %s", user.restaurant_name or doc.id)
            summary.skipped += 1
            continue

        try:
            coords = await geocoder.geocode(user.location)
        except GeocodingBlockedError as exc:
            logger.warning("Nominatim blocked %r: %s", user.location, exc)
            summary.failed += 1
            await sleep(config.backoff_delay)
            continue
        except (httpx.HTTPError, ValueError, KeyError) as exc:
            logger.error("Geocoding failed for %s: %s", user.restaurant_name or doc.id, exc)
            summary.failed += 1
            await sleep(config.backoff_delay)
            continue

        if coords is None:
            logger.info("No results for %r", user.location)
            summary.not_found += 1
            await sleep(config.rate_limit_delay)
            continue

        try:
            await store.update("users", doc.id, {"coords": coords.model_dump()})
        except StoreError as exc:
            logger.error("Could not save coordinates for %s: %s", doc.id, exc)
            summary.failed += 1
            await sleep(config.backoff_delay)
            continue

        logger.info("Geocoded %s: %s", user.restaurant_name or doc.id, coords)
        summary.geocoded += 1
        await sleep(config.rate_limit_delay)

    return summary


async def run_geocoding(config: GeocodingConfig = DEFAULT_GEOCODING_CONFIG) -> GeocodeSummary:
    if not DEFAULT_STORE_CONFIG.service_account_json:
        logger.critical("Missing FIREBASE_SERVICE_ACCOUNT env var")
        raise SystemExit(1)

    store = FirestoreRecordStore(DEFAULT_STORE_CONFIG)
    async with httpx.AsyncClient(timeout=config.timeout) as client:
        return await geocode_restaurants(store, NominatimGeocoder(client, config), config)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    result = asyncio.run(run_geocoding())
    print(
        f"Geocoding complete: {result.geocoded} geocoded, {result.skipped} skipped, "
        f"{result.not_found} not found, {result.failed} failed"
    )
