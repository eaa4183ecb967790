from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")

SOURCE_COLLECTIONS: tuple[str, ...] = (
    "users",
    "restaurantcuisine",
    "amenities",
    "mealtimes",
    "offers",
    "tables",
    "experiences",
    "menuItems",
    "openingHours",
    "reviews",
    "sections",
    "extrareserves",
    "coverimage",
    "logoimage",
)


@dataclass(frozen=True)
class IndexConfig:
    source_collections: tuple[str, ...] = SOURCE_COLLECTIONS
    aggregation_ttl: float = 300.0  # 5 minutes
    refresh_interval: float = float(os.getenv("INDEX_REFRESH_SECONDS", "600"))
    eligible_roles: frozenset[str] = field(
        default_factory=lambda: frozenset({"restaurant", "hotel"})
    )


DEFAULT_INDEX_CONFIG = IndexConfig()
