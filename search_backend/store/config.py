from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent.parent.parent / ".env")


@dataclass(frozen=True)
class StoreConfig:
    backend: str = os.getenv("STORE_BACKEND", "firestore")
    service_account_json: str = os.getenv("FIREBASE_SERVICE_ACCOUNT", "")
    search_collection: str = "restaurants_search"
    # Firestore rejects batches with more than 500 writes
    batch_size: int = 500


DEFAULT_STORE_CONFIG = StoreConfig()
