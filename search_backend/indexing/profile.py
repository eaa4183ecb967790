from __future__ import annotations

import math

from ..store.records import (
    AmenityFields,
    CoverImageFields,
    CuisineFields,
    ExperienceFields,
    ExtraReserveFields,
    LogoImageFields,
    MenuItemFields,
    OfferFields,
    RawRecord,
    TableFields,
    UserFields,
)
from .models import AttributeBucket, Offer, RestaurantProfile


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def derive_average_cost(user: UserFields, menu: list[MenuItemFields]) -> float:
    """Explicit cost if positive, else the rounded mean of positive menu prices, else 0."""
    explicit = user.average_cost if user.average_cost > 0 else user.average_cost_lower
    if explicit > 0:
        return explicit
    prices = [item.price for item in menu if item.price > 0]
    if prices:
        return float(_round_half_up(sum(prices) / len(prices)))
    return 0.0


def select_image(owner_id: str, bucket: AttributeBucket) -> str:
    """Cover image, else logo, else empty; only records belonging to ``owner_id`` count."""
    cover = next(
        (r for r in bucket.get("coverimage", ()) if r.owner_id == owner_id),
        None,
    )
    if cover is not None:
        url = cover.typed(CoverImageFields).cover_image_url
        if url:
            return url

    logo = next(
        (r for r in bucket.get("logoimage", ()) if r.owner_id == owner_id),
        None,
    )
    if logo is not None:
        return logo.typed(LogoImageFields).logo_image_url
    return ""


def _offer(record: RawRecord) -> Offer:
    fields = record.typed(OfferFields)
    return Offer(
        id=record.id,
        name=fields.name,
        price=fields.price,
        valid_from=fields.date_from,
        valid_to=fields.date_to,
    )


def _amenity_names(records: tuple[RawRecord, ...]) -> list[str]:
    names: list[str] = []
    for record in records:
        fields = record.typed(AmenityFields)
        if fields.name:
            names.append(fields.name)
        names.extend(fields.amenities)
    return names


def build_profile(owner_id: str, bucket: AttributeBucket) -> RestaurantProfile:
    users = bucket.get("users", ())
    user_record = next((r for r in users if r.id == owner_id), users[0] if users else None)
    user = user_record.typed(UserFields) if user_record else UserFields()

    cuisines = [
        cuisine.lower()
        for record in bucket.get("restaurantcuisine", ())
        for cuisine in record.typed(CuisineFields).cuisines
    ]
    menu = [record.typed(MenuItemFields) for record in bucket.get("menuItems", ())]

    return RestaurantProfile(
        id=owner_id,
        restaurant_name=user.restaurant_name,
        location=user.location,
        cuisines=cuisines,
        average_cost=derive_average_cost(user, menu),
        offers=[_offer(record) for record in bucket.get("offers", ())],
        image=select_image(owner_id, bucket),
        tables=[record.typed(TableFields) for record in bucket.get("tables", ())],
        extra_reserves=[
            record.typed(ExtraReserveFields) for record in bucket.get("extrareserves", ())
        ],
        amenities=_amenity_names(bucket.get("amenities", ())),
        experiences=[
            name
            for name in (record.typed(ExperienceFields).name for record in bucket.get("experiences", ()))
            if name
        ],
        user=user_record,
        raw=bucket,
    )
