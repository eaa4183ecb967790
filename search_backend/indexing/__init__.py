"""
Search index materialization.

Responsibilities:
- Join the normalized record collections into per-owner attribute buckets.
- Derive a canonical restaurant profile from each bucket.
- Project eligible profiles into compact search documents and persist them.
- Refresh the index on startup and on a fixed interval.
"""
