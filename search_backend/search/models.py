from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..indexing.models import SearchDocument
from ..store.records import Text


class Intent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    place: str = ""
    cuisine: str = ""
    vibe: str = ""
    max_budget: float | None = None
    people: int | None = None
    keywords: list[str] = Field(default_factory=list)


class SearchRequest(BaseModel):
    query: Text = Field(default="", description="Free-text restaurant query")


class SearchResult(BaseModel):
    total: int
    restaurants: list[SearchDocument]


class SearchResponse(BaseModel):
    success: bool = True
    cached: bool = False
    intent: Intent
    total: int
    restaurants: list[SearchDocument]
