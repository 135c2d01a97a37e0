"""Gamification API endpoints — levels, badges and stats."""

from __future__ import annotations

from datetime import tzinfo

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.database import get_session
from repquest.db.models import Badge, User, UserBadge, UserStats
from repquest.dependencies import get_redis_dep, get_timezone
from repquest.gamification.badge_engine import BadgeEngine
from repquest.gamification.events import emit_badges_unlocked
from repquest.gamification.leveling import LEVEL_TIERS, compute_level
from repquest.gamification.schemas import (
    AllBadgesResponse,
    AllTiersResponse,
    BadgeCheckResponse,
    BadgeResponse,
    EarnedBadgeResponse,
    LevelResponse,
    TierResponse,
    UserBadgesResponse,
    UserStatsResponse,
)
from repquest.gamification.stats_service import snapshot
from repquest.gamification.store import BadgeRecord, SqlBadgeStore, badge_record
from repquest.middleware.request_id import bind_user

router = APIRouter(prefix="/api/v1", tags=["Gamification"])


def badge_response(badge: BadgeRecord) -> BadgeResponse:
    return BadgeResponse(
        id=badge.id,
        name=badge.name,
        description=badge.description,
        icon=badge.icon,
        unlock_type=badge.unlock_type,
        unlock_value=badge.unlock_value,
    )


def level_response(points: int) -> LevelResponse:
    info = compute_level(points)
    return LevelResponse(
        points=info["points"],
        level=info["level"],
        tier=TierResponse(**info["tier"]),
        points_into_level=info["points_into_level"],
        points_to_next_level=info["points_to_next_level"],
        next_level=info["next_level"],
        is_special=info["is_special"],
    )


async def _get_user_or_404(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    bind_user(user_id)
    return user


async def _get_stats(db: AsyncSession, user_id: int) -> UserStats | None:
    result = await db.execute(select(UserStats).where(UserStats.user_id == user_id))
    return result.scalar_one_or_none()


# ── Levels ──


@router.get("/levels/tiers", response_model=AllTiersResponse)
async def list_tiers():
    """Get the tier table, highest tier first."""
    return AllTiersResponse(tiers=[TierResponse(**t) for t in LEVEL_TIERS])


@router.get("/levels/{points}", response_model=LevelResponse)
async def get_level_for_points(points: int = Path(ge=0)):
    """Level info for an arbitrary point total."""
    return level_response(points)


# ── Badges ──


@router.get("/badges", response_model=AllBadgesResponse)
async def list_badges(db: AsyncSession = Depends(get_session)):
    """Get the badge catalog."""
    result = await db.execute(select(Badge).order_by(Badge.sort_order, Badge.id))
    return AllBadgesResponse(badges=[badge_response(badge_record(b)) for b in result.scalars()])


# ── Per-user ──


@router.get("/users/{user_id}/level", response_model=LevelResponse)
async def get_user_level(user_id: int, db: AsyncSession = Depends(get_session)):
    """Level derived from the user's point total."""
    user = await _get_user_or_404(db, user_id)
    return level_response(user.total_points)


@router.get("/users/{user_id}/stats", response_model=UserStatsResponse)
async def get_user_stats(user_id: int, db: AsyncSession = Depends(get_session)):
    """Aggregate drill stats."""
    user = await _get_user_or_404(db, user_id)
    stats = await _get_stats(db, user_id)
    return UserStatsResponse(
        total_points=user.total_points,
        total_reps=stats.total_reps if stats else 0,
        sessions_completed=stats.sessions_completed if stats else 0,
        current_streak=stats.current_streak if stats else 0,
        longest_streak=stats.longest_streak if stats else 0,
        last_active_date=stats.last_active_date if stats else None,
    )


@router.get("/users/{user_id}/badges", response_model=UserBadgesResponse)
async def get_user_badges(user_id: int, db: AsyncSession = Depends(get_session)):
    """Badges the user has earned, newest first."""
    await _get_user_or_404(db, user_id)
    result = await db.execute(
        select(UserBadge)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.earned_at.desc())
    )
    earned = result.scalars().all()

    total_available = await db.execute(select(func.count()).select_from(Badge))

    return UserBadgesResponse(
        earned=[
            EarnedBadgeResponse(badge=badge_response(badge_record(ub.badge)), earned_at=ub.earned_at)
            for ub in earned
        ],
        total_available=total_available.scalar_one(),
        total_earned=len(earned),
    )


@router.post("/users/{user_id}/badges/check", response_model=BadgeCheckResponse)
async def check_user_badges(
    user_id: int,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    tz: tzinfo = Depends(get_timezone),
):
    """Re-run badge eligibility for a user and record any new unlocks."""
    user = await _get_user_or_404(db, user_id)
    stats = snapshot(await _get_stats(db, user_id), user)

    engine = BadgeEngine(SqlBadgeStore(db), tz=tz)
    unlocked = await engine.check_badge_unlocks(user_id, stats)
    await emit_badges_unlocked(redis, user_id, unlocked)
    return BadgeCheckResponse(unlocked=[badge_response(b) for b in unlocked])
