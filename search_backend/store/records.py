from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from typing import Annotated, Any, TypeVar

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

OWNER_FIELD = "userId"


class StoredDocument(BaseModel):
    """A document exactly as the store returned it."""

    id: str
    fields: dict[str, Any] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Lenient coercion helpers
# ---------------------------------------------------------------------------


def to_number(value: Any) -> float | None:
    """Coerce ints, floats and numeric strings to float. Anything else is None."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        cleaned = value.strip().replace(",", "")
        if not cleaned:
            return None
        try:
            number = float(cleaned)
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_timestamp(value: Any) -> datetime | None:
    """
    Parse a store-native timestamp, epoch milliseconds, or an ISO-like string.

    Returns None for anything unparsable.
    """
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        return value
    for attr in ("to_datetime", "ToDatetime"):
        converter = getattr(value, attr, None)
        if callable(converter):
            try:
                return converter()
            except (TypeError, ValueError, OverflowError):
                return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            return None
    if isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None
    return None


def _to_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _to_str_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        return [_to_str(v) for v in value if v is not None and _to_str(v).strip()]
    return []


def _to_dict(value: Any) -> dict | None:
    return value if isinstance(value, dict) else None


Number = Annotated[float, BeforeValidator(lambda v: to_number(v) or 0.0)]
OptionalNumber = Annotated[float | None, BeforeValidator(to_number)]
Text = Annotated[str, BeforeValidator(_to_str)]
TextList = Annotated[list[str], BeforeValidator(_to_str_list)]
Timestamp = Annotated[datetime | None, BeforeValidator(parse_timestamp)]
Coords = Annotated[dict | None, BeforeValidator(_to_dict)]


# ---------------------------------------------------------------------------
# Per-collection field schemas
# ---------------------------------------------------------------------------


class RecordFields(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    user_id: Text = Field(default="", alias="userId")


class UserFields(RecordFields):
    role: Text = ""
    restaurant_name: Text = Field(default="", alias="restaurantName")
    location: Text = ""
    average_cost: Number = Field(default=0.0, alias="averageCost")
    average_cost_lower: Number = Field(default=0.0, alias="averagecost")
    coords: Coords = None


class CuisineFields(RecordFields):
    cuisines: TextList = Field(default_factory=list)


class MenuItemFields(RecordFields):
    name: Text = ""
    price: Number = 0.0


class OfferFields(RecordFields):
    name: Text = ""
    price: OptionalNumber = None
    date_from: Timestamp = Field(default=None, alias="dateFrom")
    date_to: Timestamp = Field(default=None, alias="dateTo")


class TableFields(RecordFields):
    name: Text = ""
    num_seats: Number = Field(default=0.0, alias="numSeats")


class ExtraReserveFields(RecordFields):
    name: Text = ""
    capacity: Number = 0.0
    size: Text = ""
    image_url: Text = Field(default="", alias="imageUrl")


class AmenityFields(RecordFields):
    name: Text = ""
    amenities: TextList = Field(default_factory=list)


class ExperienceFields(RecordFields):
    name: Text = ""


class CoverImageFields(RecordFields):
    cover_image_url: Text = Field(default="", alias="coverImageUrl")


class LogoImageFields(RecordFields):
    logo_image_url: Text = Field(default="", alias="logoImageUrl")


F = TypeVar("F", bound=RecordFields)


class RawRecord(BaseModel):
    """One normalized store document, scoped to the owner it belongs to."""

    model_config = ConfigDict(frozen=True)

    collection: str
    id: str
    owner_id: str
    fields: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_document(cls, collection: str, doc: StoredDocument) -> RawRecord | None:
        """Return a record owned by ``userId`` (or the doc id), or None if neither exists."""
        owner_id = _to_str(doc.fields.get(OWNER_FIELD)) or doc.id
        if not owner_id:
            return None
        return cls(collection=collection, id=doc.id, owner_id=owner_id, fields=doc.fields)

    def typed(self, schema: type[F]) -> F:
        try:
            return schema.model_validate(self.fields)
        except PydanticValidationError:
            logger.warning(
                "Record %s/%s does not fit %s, using defaults",
                self.collection, self.id, schema.__name__,
            )
            return schema()
