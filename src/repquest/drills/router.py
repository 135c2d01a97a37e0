"""Drill completion endpoint."""

from __future__ import annotations

from datetime import tzinfo

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.database import get_session
from repquest.dependencies import get_redis_dep, get_timezone
from repquest.drills.completion_service import DailyLimitReached, complete_drill, get_drill, get_user
from repquest.drills.schemas import CompleteDrillRequest, CompleteDrillResponse
from repquest.gamification.router import badge_response, level_response
from repquest.gamification.schemas import LevelUpResponse
from repquest.middleware.request_id import bind_user

router = APIRouter(prefix="/api/v1", tags=["Drills"])


@router.post("/drills/{drill_id}/complete", response_model=CompleteDrillResponse, status_code=201)
async def complete_drill_endpoint(
    drill_id: int,
    body: CompleteDrillRequest,
    db: AsyncSession = Depends(get_session),
    redis: object = Depends(get_redis_dep),
    tz: tzinfo = Depends(get_timezone),
):
    """Submit a drill result. Returns points, level, level-up and new badges."""
    drill = await get_drill(db, drill_id)
    if drill is None:
        raise HTTPException(status_code=404, detail="Drill not found")
    user = await get_user(db, body.user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    bind_user(body.user_id)

    try:
        outcome = await complete_drill(db, redis, user, drill, body.reps, tz=tz)
    except DailyLimitReached as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e

    level_up = None
    if outcome.level_up is not None:
        level_up = LevelUpResponse(
            old_level=outcome.level_up.old_level,
            new_level=outcome.level_up.new_level,
            old_tier=outcome.level_up.old_tier,
            new_tier=outcome.level_up.new_tier,
            tier_changed=outcome.level_up.tier_changed,
        )

    return CompleteDrillResponse(
        result_id=outcome.result_id,
        points_earned=outcome.points_earned,
        total_points=outcome.total_points,
        level=level_response(outcome.total_points),
        level_up=level_up,
        new_badges=[badge_response(b) for b in outcome.new_badges],
        easter_egg=outcome.easter_egg,
    )
