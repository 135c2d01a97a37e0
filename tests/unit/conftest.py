"""In-memory BadgeStore used by the engine unit tests."""

from __future__ import annotations

import pytest

from repquest.gamification.seed import BADGE_SEED_DATA
from repquest.gamification.store import BadgeRecord, CompletionRecord


class FakeBadgeStore:
    """BadgeStore double with switchable failure modes."""

    def __init__(self, catalog: list[BadgeRecord], completions: list[CompletionRecord] | None = None) -> None:
        self.catalog = catalog
        self.completions = completions or []
        self.owned: dict[int, set[int]] = {}
        self.fail_on: set[str] = set()
        self.reject_insert: set[int] = set()
        self.raise_on_insert: set[int] = set()
        self.calls: list[str] = []

    def _call(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail_on:
            msg = f"{name} unavailable"
            raise ConnectionError(msg)

    async def fetch_completions(self, user_id: int) -> list[CompletionRecord]:
        self._call("fetch_completions")
        return list(self.completions)

    async def fetch_owned_badge_ids(self, user_id: int) -> set[int]:
        self._call("fetch_owned_badge_ids")
        return set(self.owned.get(user_id, set()))

    async def fetch_badge_catalog(self) -> list[BadgeRecord]:
        self._call("fetch_badge_catalog")
        return list(self.catalog)

    async def insert_unlock(self, user_id: int, badge_id: int) -> bool:
        self._call("insert_unlock")
        if badge_id in self.raise_on_insert:
            msg = "connection reset"
            raise ConnectionError(msg)
        owned = self.owned.setdefault(user_id, set())
        if badge_id in self.reject_insert or badge_id in owned:
            return False
        owned.add(badge_id)
        return True


def seed_catalog() -> list[BadgeRecord]:
    """The seeded catalog as records, ids assigned in seed order."""
    return [
        BadgeRecord(
            id=i,
            name=data["name"],
            unlock_type=data["unlock_type"],
            unlock_value=data.get("unlock_value", 0),
            description=data["description"],
            icon=data["icon"],
        )
        for i, data in enumerate(BADGE_SEED_DATA, start=1)
    ]


@pytest.fixture
def catalog() -> list[BadgeRecord]:
    return seed_catalog()


@pytest.fixture
def store(catalog: list[BadgeRecord]) -> FakeBadgeStore:
    return FakeBadgeStore(catalog)
