from __future__ import annotations

from typing import Any, Protocol

from .records import StoredDocument

Write = tuple[str, str, dict[str, Any]]


class RecordStore(Protocol):
    """Read/write access to named document collections."""

    async def get(self, collection: str, limit: int | None = None) -> list[StoredDocument]:
        """Return every document of ``collection`` in storage order."""
        ...

    async def batch_upsert(self, writes: list[Write]) -> None:
        """Replace each ``(collection, id, fields)`` document wholesale."""
        ...

    async def update(self, collection: str, doc_id: str, fields: dict[str, Any]) -> None:
        """Merge ``fields`` into an existing document."""
        ...
