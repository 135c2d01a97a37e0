"""Celebration events pushed over Redis pub/sub for the level-up and badge modals."""

from __future__ import annotations

import json
import logging

from repquest.gamification.leveling import LevelUp
from repquest.gamification.store import BadgeRecord

logger = logging.getLogger(__name__)

LEVEL_UP_CHANNEL = "pubsub:level_up"
BADGE_UNLOCKED_CHANNEL = "pubsub:badge_unlocked"


async def emit_level_up(redis: object, user_id: int, level_up: LevelUp) -> None:
    """Broadcast a level-up. No-op without a Redis client."""
    if redis is None:
        return
    try:
        await redis.publish(  # type: ignore[union-attr]
            LEVEL_UP_CHANNEL,
            json.dumps({
                "user_id": user_id,
                "old_level": level_up.old_level,
                "new_level": level_up.new_level,
                "tier": level_up.new_tier,
                "tier_changed": level_up.tier_changed,
            }),
        )
    except Exception:
        logger.warning("Failed to publish level_up broadcast", exc_info=True)


async def emit_badges_unlocked(redis: object, user_id: int, badges: list[BadgeRecord]) -> None:
    """Broadcast one event per newly unlocked badge."""
    if redis is None:
        return
    for badge in badges:
        try:
            await redis.publish(  # type: ignore[union-attr]
                BADGE_UNLOCKED_CHANNEL,
                json.dumps({
                    "user_id": user_id,
                    "badge_id": badge.id,
                    "badge_name": badge.name,
                    "icon": badge.icon,
                }),
            )
        except Exception:
            logger.warning("Failed to publish badge_unlocked notification", exc_info=True)
