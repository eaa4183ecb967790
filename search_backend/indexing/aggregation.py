from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Iterable

from ..store.base import RecordStore
from ..store.records import RawRecord, StoredDocument
from .config import DEFAULT_INDEX_CONFIG
from .models import AttributeBucket

logger = logging.getLogger(__name__)

USERS_COLLECTION = "users"

AggregationMap = dict[str, AttributeBucket]


class AggregationCache:
    """
    Single-slot cache for the most recent aggregation.

    The slot is replaced wholesale on ``set``. Entries older than ``ttl``
    seconds are reported as missing by ``get``.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_INDEX_CONFIG.aggregation_ttl,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._data: AggregationMap | None = None
        self._timestamp: float = 0.0

    def get(self) -> AggregationMap | None:
        if self._data is not None and self._clock() - self._timestamp < self.ttl:
            return self._data
        return None

    def set(self, data: AggregationMap) -> None:
        self._data, self._timestamp = data, self._clock()

    def clear(self) -> None:
        self._data, self._timestamp = None, 0.0

    def age(self) -> float | None:
        if self._data is None:
            return None
        return round(self._clock() - self._timestamp, 1)


async def _read_collection(store: RecordStore, name: str) -> list[StoredDocument]:
    try:
        return await store.get(name)
    except Exception:
        logger.warning("Failed to read collection %r, treating it as empty", name, exc_info=True)
        return []


def group_by_owner(results: Iterable[tuple[str, list[StoredDocument]]]) -> AggregationMap:
    """Group documents by owner id and source collection, keeping read order."""
    grouped: dict[str, dict[str, list[RawRecord]]] = {}
    users: list[StoredDocument] = []

    for name, docs in results:
        if name == USERS_COLLECTION:
            users = docs
        for doc in docs:
            record = RawRecord.from_document(name, doc)
            if record is None:
                continue
            grouped.setdefault(record.owner_id, {}).setdefault(name, []).append(record)

    # Users are folded in again keyed by their own id so every owner with a
    # user document has a "users" entry, even when it carries a foreign userId.
    for doc in users:
        if not doc.id:
            continue
        record = RawRecord(collection=USERS_COLLECTION, id=doc.id, owner_id=doc.id, fields=doc.fields)
        grouped.setdefault(doc.id, {}).setdefault(USERS_COLLECTION, []).append(record)

    return {
        owner_id: {name: tuple(records) for name, records in bucket.items()}
        for owner_id, bucket in grouped.items()
    }


async def load_aggregation(
    store: RecordStore,
    cache: AggregationCache,
    collections: Iterable[str] = DEFAULT_INDEX_CONFIG.source_collections,
) -> AggregationMap:
    """
    Return the per-owner bucket map, reading the store only when the cache is stale.

    Each collection is read concurrently. A failed read degrades that
    collection to empty instead of failing the whole load.
    """
    cached = cache.get()
    if cached is not None:
        logger.info("Using cached aggregation")
        return cached

    names = list(collections)
    logger.info("Fetching %d collections from the record store", len(names))
    snapshots = await asyncio.gather(*(_read_collection(store, name) for name in names))

    aggregation = group_by_owner(zip(names, snapshots))
    cache.set(aggregation)
    return aggregation
