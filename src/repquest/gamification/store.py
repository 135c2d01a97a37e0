"""Persistent-store boundary for the badge engine.

The engine only talks to a :class:`BadgeStore`. :class:`SqlBadgeStore` is the
production implementation; tests substitute an in-memory fake.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.db.models import Badge, DrillResult, UserBadge


@dataclass(frozen=True)
class CompletionRecord:
    drill_id: int
    reps: int
    completed_at: datetime


@dataclass(frozen=True)
class BadgeRecord:
    id: int
    name: str
    unlock_type: str
    unlock_value: int = 0
    description: str = ""
    icon: str | None = None


@dataclass(frozen=True)
class StatsSnapshot:
    """Aggregate counters the threshold rules compare against."""

    current_streak: int = 0
    total_reps: int = 0
    sessions_completed: int = 0
    total_points: int = 0


class BadgeStore(Protocol):
    """The four store operations the badge engine depends on."""

    async def fetch_completions(self, user_id: int) -> list[CompletionRecord]: ...

    async def fetch_owned_badge_ids(self, user_id: int) -> set[int]: ...

    async def fetch_badge_catalog(self) -> list[BadgeRecord]: ...

    async def insert_unlock(self, user_id: int, badge_id: int) -> bool: ...


def badge_record(badge: Badge) -> BadgeRecord:
    """Detach a Badge row into an immutable record."""
    return BadgeRecord(
        id=badge.id,
        name=badge.name,
        unlock_type=badge.unlock_type,
        unlock_value=badge.unlock_value,
        description=badge.description,
        icon=badge.icon,
    )


class SqlBadgeStore:
    """BadgeStore backed by the SQLAlchemy session."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def fetch_completions(self, user_id: int) -> list[CompletionRecord]:
        result = await self.db.execute(
            select(DrillResult.drill_id, DrillResult.reps, DrillResult.completed_at)
            .where(DrillResult.user_id == user_id)
            .order_by(DrillResult.completed_at.asc())
        )
        return [
            CompletionRecord(drill_id=row.drill_id, reps=row.reps, completed_at=row.completed_at)
            for row in result
        ]

    async def fetch_owned_badge_ids(self, user_id: int) -> set[int]:
        result = await self.db.execute(
            select(UserBadge.badge_id).where(UserBadge.user_id == user_id)
        )
        return set(result.scalars())

    async def fetch_badge_catalog(self) -> list[BadgeRecord]:
        result = await self.db.execute(select(Badge).order_by(Badge.sort_order, Badge.id))
        return [badge_record(b) for b in result.scalars()]

    async def insert_unlock(self, user_id: int, badge_id: int) -> bool:
        """Insert and commit one unlock. Returns False if it already exists.

        Other database errors roll the session back before propagating, so
        later unlocks in the same session still go through.
        """
        self.db.add(UserBadge(
            user_id=user_id,
            badge_id=badge_id,
            earned_at=datetime.now(timezone.utc),
        ))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False  # Race condition: badge already unlocked
        except SQLAlchemyError:
            await self.db.rollback()
            raise
        return True
