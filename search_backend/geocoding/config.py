from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class GeocodingConfig:
    base_url: str = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
    user_agent: str = os.getenv("NOMINATIM_USER_AGENT", "ReserveMeBot/1.0 (contact@reserveme.ke)")
    rate_limit_delay: float = 1.2
    backoff_delay: float = 3.0
    timeout: float = 10.0


DEFAULT_GEOCODING_CONFIG = GeocodingConfig()
