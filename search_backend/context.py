from __future__ import annotations

import asyncio
import functools
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from .indexing.aggregation import AggregationCache
from .indexing.config import DEFAULT_INDEX_CONFIG, IndexConfig
from .llm.config import DEFAULT_LLM_CONFIG, LLMConfig
from .llm.groq_client import complete
from .search.cache import IntentCache
from .search.config import DEFAULT_SEARCH_CONFIG, SearchConfig
from .store.base import RecordStore
from .store.config import DEFAULT_STORE_CONFIG, StoreConfig
from .store.firestore import FirestoreRecordStore
from .store.memory import InMemoryRecordStore

logger = logging.getLogger(__name__)

CompletionFn = Callable[[str], Awaitable[str]]


@dataclass
class ServiceContext:
    """Shared collaborators and caches, passed to every indexing and search call."""

    store: RecordStore
    complete: CompletionFn
    index_config: IndexConfig = DEFAULT_INDEX_CONFIG
    store_config: StoreConfig = DEFAULT_STORE_CONFIG
    search_config: SearchConfig = DEFAULT_SEARCH_CONFIG
    aggregation_cache: AggregationCache | None = None
    intent_cache: IntentCache | None = None
    search_slots: asyncio.Semaphore = field(init=False)

    def __post_init__(self) -> None:
        if self.aggregation_cache is None:
            self.aggregation_cache = AggregationCache(ttl=self.index_config.aggregation_ttl)
        if self.intent_cache is None:
            self.intent_cache = IntentCache(max_entries=self.search_config.intent_cache_size)
        self.search_slots = asyncio.Semaphore(self.search_config.max_concurrent_searches)


def _require(name: str, value: str) -> None:
    if not value:
        logger.critical("Missing %s env var", name)
        raise SystemExit(1)


def build_context(
    llm_config: LLMConfig = DEFAULT_LLM_CONFIG,
    store_config: StoreConfig = DEFAULT_STORE_CONFIG,
) -> ServiceContext:
    """
    Build the production context from environment configuration.

    Exits the process when credentials are missing.
    """
    _require("GROQ_API_KEY", llm_config.api_key)

    if store_config.backend == "memory":
        logger.warning("Using the in-memory record store; data will not persist")
        store: RecordStore = InMemoryRecordStore()
    else:
        _require("FIREBASE_SERVICE_ACCOUNT", store_config.service_account_json)
        store = FirestoreRecordStore(store_config)

    return ServiceContext(
        store=store,
        complete=functools.partial(complete, config=llm_config),
        store_config=store_config,
    )
