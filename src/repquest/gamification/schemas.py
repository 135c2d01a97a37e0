"""Pydantic response models for gamification endpoints."""

from __future__ import annotations

from datetime import date, datetime

from pydantic import BaseModel


# --- Levels ---


class TierResponse(BaseModel):
    name: str
    min_level: int
    color: str
    emoji: str


class AllTiersResponse(BaseModel):
    tiers: list[TierResponse]


class LevelResponse(BaseModel):
    points: int
    level: int
    tier: TierResponse
    points_into_level: int
    points_to_next_level: int
    next_level: int
    is_special: bool = False


class LevelUpResponse(BaseModel):
    old_level: int
    new_level: int
    old_tier: str
    new_tier: str
    tier_changed: bool


# --- Badge ---


class BadgeResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    icon: str | None = None
    unlock_type: str
    unlock_value: int = 0


class AllBadgesResponse(BaseModel):
    badges: list[BadgeResponse]


class EarnedBadgeResponse(BaseModel):
    badge: BadgeResponse
    earned_at: datetime


class UserBadgesResponse(BaseModel):
    earned: list[EarnedBadgeResponse]
    total_available: int
    total_earned: int


class BadgeCheckResponse(BaseModel):
    unlocked: list[BadgeResponse]


# --- Stats ---


class UserStatsResponse(BaseModel):
    total_points: int
    total_reps: int
    sessions_completed: int
    current_streak: int
    longest_streak: int
    last_active_date: date | None = None
