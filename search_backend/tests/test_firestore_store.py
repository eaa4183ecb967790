import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from search_backend.errors import StoreError
from search_backend.store.config import StoreConfig
from search_backend.store.firestore import FirestoreRecordStore


def _snapshot(doc_id, data):
    snap = MagicMock()
    snap.id = doc_id
    snap.to_dict.return_value = data
    return snap


def test_get_returns_stored_documents():
    client = MagicMock()
    client.collection.return_value.get = AsyncMock(
        return_value=[_snapshot("r1", {"role": "hotel"}), _snapshot("r2", None)]
    )
    store = FirestoreRecordStore(StoreConfig(), client=client)

    docs = asyncio.run(store.get("users"))

    client.collection.assert_called_with("users")
    assert [(d.id, d.fields) for d in docs] == [("r1", {"role": "hotel"}), ("r2", {})]


def test_get_with_limit():
    client = MagicMock()
    limited = client.collection.return_value.limit.return_value
    limited.get = AsyncMock(return_value=[_snapshot("r1", {})])
    store = FirestoreRecordStore(StoreConfig(), client=client)

    docs = asyncio.run(store.get("users", limit=5))

    client.collection.return_value.limit.assert_called_once_with(5)
    assert len(docs) == 1


def test_get_wraps_api_errors():
    client = MagicMock()
    client.collection.return_value.get = AsyncMock(side_effect=google_exceptions.ServiceUnavailable("down"))
    store = FirestoreRecordStore(StoreConfig(), client=client)

    with pytest.raises(StoreError):
        asyncio.run(store.get("users"))


def test_batch_upsert_chunks_by_batch_size():
    client = MagicMock()
    batches = [MagicMock(), MagicMock()]
    for batch in batches:
        batch.commit = AsyncMock()
    client.batch.side_effect = batches
    store = FirestoreRecordStore(StoreConfig(batch_size=2), client=client)

    writes = [("restaurants_search", f"r{i}", {"restaurant_id": f"r{i}"}) for i in range(3)]
    asyncio.run(store.batch_upsert(writes))

    assert batches[0].set.call_count == 2
    assert batches[1].set.call_count == 1
    batches[0].commit.assert_awaited_once()
    batches[1].commit.assert_awaited_once()


def test_batch_upsert_wraps_commit_errors():
    client = MagicMock()
    batch = MagicMock()
    batch.commit = AsyncMock(side_effect=google_exceptions.DeadlineExceeded("slow"))
    client.batch.return_value = batch
    store = FirestoreRecordStore(StoreConfig(), client=client)

    with pytest.raises(StoreError):
        asyncio.run(store.batch_upsert([("restaurants_search", "r1", {})]))
