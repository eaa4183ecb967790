from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

import pandas as pd
from pydantic import ValidationError as PydanticValidationError

from ..indexing.models import SearchDocument
from ..store.base import RecordStore
from .models import Intent, SearchResult

if TYPE_CHECKING:
    from ..context import ServiceContext

logger = logging.getLogger(__name__)

_CUISINE_NOISE_RE = re.compile(r"\bfood\b|\bcuisine\b")


def normalize_cuisine(value: str) -> str:
    """Lowercase and drop the literal words "food" and "cuisine"."""
    text = _CUISINE_NOISE_RE.sub("", value.lower().replace("_", " "))
    return " ".join(text.split())


async def load_index(store: RecordStore, collection: str) -> list[SearchDocument]:
    """Read the whole search collection in storage order."""
    documents: list[SearchDocument] = []
    for doc in await store.get(collection):
        try:
            documents.append(SearchDocument.model_validate(doc.fields))
        except PydanticValidationError:
            logger.warning("Skipping malformed search document %r", doc.id)
    return documents


def _frame(documents: list[SearchDocument]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "location_lower": [d.location.lower().replace("_", " ") for d in documents],
            "cuisines_clean": [[normalize_cuisine(c) for c in d.cuisines] for d in documents],
            "vibe_text": [" ".join(d.vibes + d.amenities) for d in documents],
            "average_cost": [d.average_cost for d in documents],
            "max_capacity": [d.max_capacity for d in documents],
            "blob": [d.model_dump_json(by_alias=True).lower() for d in documents],
        }
    )


def filter_documents(documents: list[SearchDocument], intent: Intent) -> list[SearchDocument]:
    """Apply every filter present in ``intent`` conjunctively, keeping index order."""
    if not documents:
        return []

    df = _frame(documents)
    mask = pd.Series(True, index=df.index)

    if intent.place:
        mask &= df["location_lower"].str.contains(intent.place, regex=False)

    cuisine = normalize_cuisine(intent.cuisine) if intent.cuisine else ""
    if cuisine:
        mask &= df["cuisines_clean"].apply(lambda cl: any(cuisine in c for c in cl))

    if intent.vibe:
        mask &= df["vibe_text"].str.contains(intent.vibe, regex=False)

    if intent.max_budget:
        mask &= df["average_cost"] <= intent.max_budget

    if intent.people:
        mask &= df["max_capacity"] >= intent.people

    keywords = [k.lower() for k in intent.keywords if k and k.strip()]
    if keywords:
        mask &= df["blob"].apply(lambda blob: any(k in blob for k in keywords))

    return [documents[i] for i in df.index[mask.to_numpy()]]


def score_document(document: SearchDocument, intent: Intent) -> int:
    """Ambience match plus exact location match, one point each."""
    score = 0
    if intent.vibe and intent.vibe in " ".join(document.vibes + document.amenities):
        score += 1
    if intent.place and document.location.lower().strip() == intent.place:
        score += 1
    return score


def rank_documents(documents: list[SearchDocument], intent: Intent) -> list[SearchDocument]:
    """Stable sort by descending score; equal scores keep index order."""
    return sorted(documents, key=lambda d: score_document(d, intent), reverse=True)


async def search(intent: Intent, ctx: ServiceContext) -> SearchResult:
    documents = await load_index(ctx.store, ctx.store_config.search_collection)
    matches = filter_documents(documents, intent)
    if ctx.search_config.ranked:
        matches = rank_documents(matches, intent)
    return SearchResult(total=len(matches), restaurants=matches[: ctx.search_config.result_cap])
