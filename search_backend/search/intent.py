from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, Any

from ..errors import MalformedIntentError
from ..store.records import to_number
from .json_extract import extract_json_object
from .models import Intent

if TYPE_CHECKING:
    from ..context import ServiceContext

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# LLM Prompt
# ---------------------------------------------------------------------------

INTENT_PROMPT_TEMPLATE = """\
You are an AI that extracts restaurant search intent.

Extract the following fields if present:
- place (area or location)
- cuisine (food type)
- vibe (romantic, family, chill, rooftop, etc)
- maxBudget (number only, if price is mentioned)
- people (number of guests, detect from phrases like:
  "for 2", "2 people", "group of 5", "for ten", "party of 8")
- keywords (any remaining useful words)

Return ONLY valid JSON in this format:

{{
  "place": "",
  "cuisine": "",
  "vibe": "",
  "maxBudget": null,
  "people": null,
  "keywords": []
}}

Query: "{query}"
"""


def build_prompt(query: str) -> str:
    return INTENT_PROMPT_TEMPLATE.format(query=query)


# ---------------------------------------------------------------------------
# Normalization
# ---------------------------------------------------------------------------

_WHITESPACE_RE = re.compile(r"\s+")
_PEOPLE_RE = re.compile(r"\b(\d{1,2})\s*(?:people|persons|guests|pax)\b", re.IGNORECASE)


def normalize_query(query: str) -> str:
    """Cache key for a raw query: lowercased and trimmed."""
    return query.lower().strip()


def normalize_text(value: Any) -> str:
    if value is None or isinstance(value, (dict, list)):
        return ""
    text = str(value).lower().replace("_", " ")
    return _WHITESPACE_RE.sub(" ", text).strip()


def coerce_number(value: Any) -> float | None:
    """Numeric value or None; zero counts as absent."""
    return to_number(value) or None


def extract_people_from_text(text: str) -> int | None:
    match = _PEOPLE_RE.search(text or "")
    return int(match.group(1)) if match else None


def _coerce_people(raw: dict[str, Any], query: str) -> int | None:
    for key in ("people", "groupSize"):
        number = coerce_number(raw.get(key))
        if number is not None and number > 0:
            return int(number)
    return extract_people_from_text(query)


def coerce_keywords(value: Any) -> list[str]:
    if isinstance(value, str):
        return [value.strip()] if value.strip() else []
    if isinstance(value, (list, tuple)):
        return [str(k).strip() for k in value if k is not None and str(k).strip()]
    return []


def normalize_intent(raw: dict[str, Any], query: str) -> Intent:
    budget = coerce_number(raw.get("maxBudget"))
    return Intent(
        place=normalize_text(raw.get("place")),
        cuisine=normalize_text(raw.get("cuisine")),
        vibe=normalize_text(raw.get("vibe")),
        max_budget=budget if budget is not None and budget > 0 else None,
        people=_coerce_people(raw, query),
        keywords=coerce_keywords(raw.get("keywords")),
    )


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------


async def extract_intent(query: str, ctx: ServiceContext) -> tuple[Intent, bool]:
    """
    Return ``(intent, cached)`` for ``query``.

    Cache hits replay the stored intent as-is. Unparseable completion output
    fails open to an empty intent. A failed completion call raises
    ``CompletionError`` and is not cached.
    """
    key = normalize_query(query)
    cached = ctx.intent_cache.get(key)
    if cached is not None:
        logger.debug("Intent cache hit for %r", key)
        return cached, True

    logger.info("Extracting intent for %r", key)
    raw_text = await ctx.complete(build_prompt(query))
    logger.debug("Completion output: %s", raw_text)

    try:
        raw = extract_json_object(raw_text)
    except MalformedIntentError:
        logger.warning("Completion output had no JSON object, using empty intent")
        raw = {}

    intent = normalize_intent(raw, query)
    ctx.intent_cache.set(key, intent)
    return intent, False
