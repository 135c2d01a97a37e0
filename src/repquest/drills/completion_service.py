"""Drill completion: award points, update stats, detect level-ups and badge unlocks."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.db.models import Drill, DrillResult, User
from repquest.gamification.badge_engine import BadgeEngine
from repquest.gamification.events import emit_badges_unlocked, emit_level_up
from repquest.gamification.leveling import LevelUp, check_special_value, detect_level_up
from repquest.gamification.stats_service import get_or_create_stats, local_date, record_completion, snapshot
from repquest.gamification.store import BadgeRecord, SqlBadgeStore

logger = structlog.get_logger(__name__)


class DailyLimitReached(ValueError):
    """The drill allows one completion per day and it was already done today."""


@dataclass
class CompletionResult:
    result_id: int
    points_earned: int
    total_points: int
    level_up: LevelUp | None = None
    new_badges: list[BadgeRecord] = field(default_factory=list)
    easter_egg: bool = False


def calculate_points(drill: Drill, reps: int) -> int:
    """Points for one completion: per-rep points plus the completion bonus."""
    return reps * (drill.points_per_rep or 0) + (drill.points_for_completion or 0)


async def get_drill(db: AsyncSession, drill_id: int) -> Drill | None:
    result = await db.execute(select(Drill).where(Drill.id == drill_id))
    return result.scalar_one_or_none()


async def get_user(db: AsyncSession, user_id: int) -> User | None:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def completed_on(
    db: AsyncSession, user_id: int, drill_id: int, day: datetime, tz: tzinfo
) -> bool:
    """True if the user already has a result for this drill on the local date of ``day``.

    Any local date lies within a day either side of ``day`` in UTC, so only
    results in that window are loaded.
    """
    if day.tzinfo is not None:
        day = day.astimezone(timezone.utc)
    result = await db.execute(
        select(DrillResult.completed_at).where(
            DrillResult.user_id == user_id,
            DrillResult.drill_id == drill_id,
            DrillResult.completed_at > day - timedelta(days=1),
            DrillResult.completed_at < day + timedelta(days=1),
        )
    )
    target = local_date(day, tz)
    return any(local_date(ts, tz) == target for ts in result.scalars())


async def complete_drill(
    db: AsyncSession,
    redis: object,
    user: User,
    drill: Drill,
    reps: int,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
) -> CompletionResult:
    """Record a completed drill and run level-up and badge detection.

    1. Enforce the drill's daily limit
    2. Insert the drill result and add the points to the user's total
    3. Update aggregate stats (reps, sessions, streak) and commit
    4. Detect a level-up
    5. Evaluate badges against the fresh stats and full history
    6. Publish celebration events
    """
    if reps < 0:
        msg = "Reps must be a positive number"
        raise ValueError(msg)
    if now is None:
        now = datetime.now(timezone.utc)

    if drill.daily_limit and await completed_on(db, user.id, drill.id, now, tz):
        msg = "You already completed this drill today! Come back tomorrow!"
        raise DailyLimitReached(msg)

    points = calculate_points(drill, reps)
    old_points = user.total_points or 0

    result = DrillResult(
        user_id=user.id,
        drill_id=drill.id,
        drill_name=drill.name,
        reps=reps,
        points=points,
        completed_at=now,
    )
    db.add(result)
    user.total_points = old_points + points

    stats = await get_or_create_stats(db, user.id)
    record_completion(stats, reps, local_date(now, tz), now)
    await db.commit()

    # Unlock inserts may roll back the session, so read everything needed first
    user_id = user.id
    total_points = user.total_points
    result_id = result.id
    stats_snapshot = snapshot(stats, user)

    logger.info(
        "drill_completed",
        user_id=user_id,
        drill_id=drill.id,
        reps=reps,
        points=points,
        total_points=total_points,
    )

    level_up = detect_level_up(old_points, total_points)
    if level_up is not None:
        logger.info("level_up", user_id=user_id, old_level=level_up.old_level, new_level=level_up.new_level)
        await emit_level_up(redis, user_id, level_up)

    engine = BadgeEngine(SqlBadgeStore(db), tz=tz)
    new_badges = await engine.check_badge_unlocks(user_id, stats_snapshot)
    await emit_badges_unlocked(redis, user_id, new_badges)

    return CompletionResult(
        result_id=result_id,
        points_earned=points,
        total_points=total_points,
        level_up=level_up,
        new_badges=new_badges,
        easter_egg=check_special_value(points) or check_special_value(total_points),
    )
