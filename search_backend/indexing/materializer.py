from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from ..store.records import UserFields
from .aggregation import load_aggregation
from .models import RestaurantProfile, SearchDocument
from .profile import build_profile

if TYPE_CHECKING:
    from ..context import ServiceContext

logger = logging.getLogger(__name__)


def _lower_all(values: Iterable[str]) -> list[str]:
    """Lowercased, trimmed, first-seen order, without duplicates."""
    return list(dict.fromkeys(v.strip().lower() for v in values if v and v.strip()))


def is_eligible(profile: RestaurantProfile, roles: Iterable[str]) -> bool:
    """True when the owner's user record carries one of the restaurant roles."""
    if profile.user is None:
        return False
    role = profile.user.typed(UserFields).role.strip().lower()
    return role in set(roles)


def to_search_document(profile: RestaurantProfile, now: datetime) -> SearchDocument:
    seats = [int(table.num_seats) for table in profile.tables]
    return SearchDocument(
        restaurant_id=profile.id,
        restaurant_name=profile.restaurant_name,
        location=profile.location,
        cuisines=_lower_all(profile.cuisines),
        average_cost=profile.average_cost,
        max_capacity=max(seats, default=0),
        image=profile.image,
        amenities=_lower_all(profile.amenities),
        vibes=_lower_all(profile.experiences),
        updated_at=now,
    )


async def rebuild_index(ctx: ServiceContext) -> int:
    """
    Rebuild the search collection from the current aggregation.

    Every eligible owner gets one document keyed by owner id, replacing the
    previous one. Returns the number of indexed restaurants.
    """
    aggregation = await load_aggregation(
        ctx.store, ctx.aggregation_cache, ctx.index_config.source_collections
    )
    now = datetime.now(timezone.utc)
    collection = ctx.store_config.search_collection

    writes = []
    skipped = 0
    for owner_id, bucket in aggregation.items():
        profile = build_profile(owner_id, bucket)
        if not is_eligible(profile, ctx.index_config.eligible_roles):
            skipped += 1
            continue
        document = to_search_document(profile, now)
        writes.append((collection, owner_id, document.model_dump(by_alias=True)))

    if writes:
        await ctx.store.batch_upsert(writes)
    logger.info("Indexed %d restaurants (%d owners skipped)", len(writes), skipped)
    return len(writes)


async def run_periodic_refresh(ctx: ServiceContext, interval: float | None = None) -> None:
    """Rebuild the index every ``interval`` seconds until cancelled."""
    period = interval if interval is not None else ctx.index_config.refresh_interval
    while True:
        await asyncio.sleep(period)
        try:
            await rebuild_index(ctx)
        except Exception:
            logger.exception("Periodic index rebuild failed")
