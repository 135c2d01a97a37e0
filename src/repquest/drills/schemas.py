"""Pydantic request/response models for drill completion."""

from __future__ import annotations

from pydantic import BaseModel, Field

from repquest.gamification.schemas import BadgeResponse, LevelResponse, LevelUpResponse


class CompleteDrillRequest(BaseModel):
    user_id: int
    reps: int = Field(0, ge=0)


class CompleteDrillResponse(BaseModel):
    result_id: int
    points_earned: int
    total_points: int
    level: LevelResponse
    level_up: LevelUpResponse | None = None
    new_badges: list[BadgeResponse] = []
    easter_egg: bool = False
