from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class SearchConfig:
    result_cap: int = 50
    intent_cache_size: int = int(os.getenv("INTENT_CACHE_SIZE", "1024"))
    max_concurrent_searches: int = int(os.getenv("MAX_CONCURRENT_SEARCHES", "32"))
    ranked: bool = False


DEFAULT_SEARCH_CONFIG = SearchConfig()
