from __future__ import annotations

import pytest

from search_backend.context import ServiceContext
from search_backend.store.memory import InMemoryRecordStore

SAMPLE_COLLECTIONS = {
    "users": {
        "r1": {
            "role": "hotel",
            "restaurantName": "Sushi Bay",
            "location": "Kilimani, Nairobi",
            "averageCost": 1500,
        },
        "r2": {
            "role": "restaurant",
            "restaurantName": "Mama Oliech",
            "location": "Westlands",
            "averageCost": 0,
        },
        "d1": {"role": "diner", "restaurantName": "", "location": "Kilimani"},
    },
    "restaurantcuisine": {
        "c1": {"userId": "r1", "cuisines": ["Japanese", "Sushi"]},
        "c2": {"userId": "r2", "cuisines": ["Kenyan Food"]},
    },
    "menuItems": {
        "m1": {"userId": "r2", "price": 800},
        "m2": {"userId": "r2", "price": "1200"},
        "m3": {"userId": "r2", "price": 0},
    },
    "tables": {
        "t1": {"userId": "r1", "numSeats": 4},
        "t2": {"userId": "r1", "numSeats": "8"},
        "t3": {"userId": "r2", "numSeats": 2},
    },
    "amenities": {"a1": {"userId": "r1", "name": "Rooftop"}},
    "experiences": {
        "e1": {"userId": "r1", "name": "Romantic"},
        "e2": {"userId": "r2", "name": "Family"},
    },
    "coverimage": {"ci1": {"userId": "r1", "coverImageUrl": "https://img.example/r1-cover.jpg"}},
    "logoimage": {"li2": {"userId": "r2", "logoImageUrl": "https://img.example/r2-logo.png"}},
    "offers": {
        "o1": {
            "userId": "r1",
            "name": "Happy hour",
            "price": "500",
            "dateFrom": "2024-01-01T00:00:00Z",
            "dateTo": "not a date",
        },
    },
}


class FakeCompletion:
    """Stand-in for the completion service that records every prompt."""

    def __init__(self, response: str = "{}", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    async def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def make_store(**extra: dict) -> InMemoryRecordStore:
    collections = {name: dict(docs) for name, docs in SAMPLE_COLLECTIONS.items()}
    for name, docs in extra.items():
        collections.setdefault(name, {}).update(docs)
    return InMemoryRecordStore(collections)


@pytest.fixture
def store() -> InMemoryRecordStore:
    return make_store()


@pytest.fixture
def completion() -> FakeCompletion:
    return FakeCompletion()


@pytest.fixture
def ctx(store: InMemoryRecordStore, completion: FakeCompletion) -> ServiceContext:
    return ServiceContext(store=store, complete=completion)
