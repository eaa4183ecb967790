from __future__ import annotations

import json
import logging
from typing import Any

import firebase_admin
from firebase_admin import credentials, firestore_async
from google.api_core import exceptions as google_exceptions

from ..errors import StoreError
from .base import Write
from .config import DEFAULT_STORE_CONFIG, StoreConfig
from .records import StoredDocument

logger = logging.getLogger(__name__)


def _initialize_app(service_account_json: str) -> firebase_admin.App:
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass
    service_account = json.loads(service_account_json)
    return firebase_admin.initialize_app(credentials.Certificate(service_account))


class FirestoreRecordStore:
    """Record store backed by the async Firestore client."""

    def __init__(self, config: StoreConfig = DEFAULT_STORE_CONFIG, client: Any = None) -> None:
        self._config = config
        if client is None:
            app = _initialize_app(config.service_account_json)
            client = firestore_async.client(app)
        self._db = client

    async def get(self, collection: str, limit: int | None = None) -> list[StoredDocument]:
        query = self._db.collection(collection)
        if limit is not None:
            query = query.limit(limit)
        try:
            snapshots = await query.get()
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(f"Failed to read collection {collection!r}: {exc}") from exc
        return [StoredDocument(id=snap.id, fields=snap.to_dict() or {}) for snap in snapshots]

    async def batch_upsert(self, writes: list[Write]) -> None:
        size = self._config.batch_size
        for start in range(0, len(writes), size):
            batch = self._db.batch()
            for collection, doc_id, fields in writes[start : start + size]:
                batch.set(self._db.collection(collection).document(doc_id), fields)
            try:
                await batch.commit()
            except google_exceptions.GoogleAPIError as exc:
                raise StoreError(f"Batch upsert failed at write {start}: {exc}") from exc
        logger.debug("Upserted %d documents", len(writes))

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        try:
            await self._db.collection(collection).document(doc_id).update(fields)
        except google_exceptions.GoogleAPIError as exc:
            raise StoreError(f"Failed to update {collection}/{doc_id}: {exc}") from exc
