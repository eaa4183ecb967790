from __future__ import annotations

from collections import OrderedDict

from .config import DEFAULT_SEARCH_CONFIG
from .models import Intent


class IntentCache:
    """
    LRU map from normalized query text to a previously extracted intent.

    Entries never expire; the least recently used entry is evicted once
    ``max_entries`` is exceeded. Hits return the stored intent unchanged.
    """

    def __init__(self, max_entries: int = DEFAULT_SEARCH_CONFIG.intent_cache_size) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be at least 1")
        self.max_entries = max_entries
        self._entries: OrderedDict[str, Intent] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def get(self, key: str) -> Intent | None:
        intent = self._entries.get(key)
        if intent is None:
            self._misses += 1
            return None
        self._entries.move_to_end(key)
        self._hits += 1
        return intent

    def set(self, key: str, intent: Intent) -> None:
        self._entries[key] = intent
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            self._entries.popitem(last=False)

    def stats(self) -> dict:
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": round(self._hits / total * 100, 1) if total > 0 else 0.0,
        }

    def clear(self) -> None:
        self._entries.clear()
        self._hits = 0
        self._misses = 0
