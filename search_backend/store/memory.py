from __future__ import annotations

import copy
from typing import Any

from ..errors import StoreError
from .base import Write
from .records import StoredDocument


class InMemoryRecordStore:
    """
    Dict-backed record store.

    Collections keep insertion order. ``fail_collections`` makes reads of the
    named collections raise ``StoreError``.
    """

    def __init__(
        self,
        collections: dict[str, dict[str, dict[str, Any]]] | None = None,
        fail_collections: set[str] | None = None,
    ) -> None:
        self._collections: dict[str, dict[str, dict[str, Any]]] = {
            name: dict(docs) for name, docs in (collections or {}).items()
        }
        self.fail_collections: set[str] = set(fail_collections or ())
        self.read_count = 0
        self.write_count = 0

    def add(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        self._collections.setdefault(collection, {})[doc_id] = fields

    async def get(self, collection: str, limit: int | None = None) -> list[StoredDocument]:
        self.read_count += 1
        if collection in self.fail_collections:
            raise StoreError(f"Collection {collection!r} is unavailable")
        docs = [
            StoredDocument(id=doc_id, fields=copy.deepcopy(fields))
            for doc_id, fields in self._collections.get(collection, {}).items()
        ]
        return docs[:limit] if limit is not None else docs

    async def batch_upsert(self, writes: list[Write]) -> None:
        self.write_count += 1
        for collection, doc_id, fields in writes:
            if collection in self.fail_collections:
                raise StoreError(f"Collection {collection!r} is unavailable")
        for collection, doc_id, fields in writes:
            self._collections.setdefault(collection, {})[doc_id] = copy.deepcopy(fields)

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        docs = self._collections.get(collection, {})
        if doc_id not in docs:
            raise StoreError(f"Document {collection}/{doc_id} does not exist")
        docs[doc_id] = {**docs[doc_id], **copy.deepcopy(fields)}
