from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..store.records import ExtraReserveFields, RawRecord, TableFields

AttributeBucket = dict[str, tuple[RawRecord, ...]]


class Offer(BaseModel):
    id: str
    name: str = ""
    price: float | None = None
    valid_from: datetime | None = None
    valid_to: datetime | None = None


class RestaurantProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    restaurant_name: str = ""
    location: str = ""
    cuisines: list[str] = Field(default_factory=list)
    average_cost: float = Field(default=0.0, ge=0.0)
    offers: list[Offer] = Field(default_factory=list)
    image: str = ""
    tables: list[TableFields] = Field(default_factory=list)
    extra_reserves: list[ExtraReserveFields] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    experiences: list[str] = Field(default_factory=list)
    user: RawRecord | None = None
    raw: AttributeBucket = Field(default_factory=dict)


class SearchDocument(BaseModel):
    """The persisted, queryable projection of a restaurant profile."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    restaurant_id: str
    restaurant_name: str = ""
    location: str = ""
    cuisines: list[str] = Field(default_factory=list)
    average_cost: float = 0.0
    max_capacity: int = 0
    image: str = ""
    amenities: list[str] = Field(default_factory=list)
    vibes: list[str] = Field(default_factory=list)
    updated_at: datetime | None = None
