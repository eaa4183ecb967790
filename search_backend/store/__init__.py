"""
Record store layer.

Responsibilities:
- Read named collections of loosely-typed documents from the document store.
- Normalize raw documents into typed ``RawRecord`` objects keyed by owner id.
- Persist the denormalized search index with batched upserts.
"""
