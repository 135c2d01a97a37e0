"""Per-user aggregate stats: reps, sessions and the daily streak."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.db.models import User, UserStats
from repquest.gamification.store import StatsSnapshot


def local_date(ts: datetime, tz: tzinfo = timezone.utc) -> date:
    """Calendar date of ``ts`` in ``tz``. Naive timestamps are taken as UTC."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz).date()


async def get_or_create_stats(db: AsyncSession, user_id: int) -> UserStats:
    """Get or create the aggregate stats row for a user."""
    result = await db.execute(select(UserStats).where(UserStats.user_id == user_id))
    stats = result.scalar_one_or_none()
    if stats is None:
        stats = UserStats(
            user_id=user_id,
            total_reps=0,
            sessions_completed=0,
            current_streak=0,
            longest_streak=0,
            updated_at=datetime.now(timezone.utc),
        )
        db.add(stats)
        await db.flush()
    return stats


def advance_streak(stats: UserStats, day: date) -> None:
    """Extend, keep or restart the daily streak for activity on ``day``.

    Same day: unchanged. Day after the last active day: +1. Any gap: back to 1.
    Activity dated before the last active day does not move the streak.
    """
    last = stats.last_active_date
    if last is not None and day <= last:
        return

    if last is not None and day - last == timedelta(days=1):
        stats.current_streak += 1
    else:
        stats.current_streak = 1
    stats.longest_streak = max(stats.longest_streak, stats.current_streak)
    stats.last_active_date = day


def record_completion(stats: UserStats, reps: int, day: date, now: datetime) -> None:
    """Apply one drill completion to the aggregate counters."""
    stats.total_reps += reps
    stats.sessions_completed += 1
    advance_streak(stats, day)
    stats.updated_at = now


def snapshot(stats: UserStats | None, user: User) -> StatsSnapshot:
    """Freeze the counters the badge engine needs."""
    if stats is None:
        return StatsSnapshot(total_points=user.total_points)
    return StatsSnapshot(
        current_streak=stats.current_streak,
        total_reps=stats.total_reps,
        sessions_completed=stats.sessions_completed,
        total_points=user.total_points,
    )
