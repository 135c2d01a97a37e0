"""Badge catalog seed data."""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.db.models import Badge

logger = logging.getLogger(__name__)

BADGE_SEED_DATA: list[dict] = [
    # Drill count
    {"name": "First Steps", "description": "Complete your first drill", "icon": "\U0001f463",
     "unlock_type": "drills", "unlock_value": 1},
    {"name": "Getting Started", "description": "Complete 5 drills", "icon": "\U0001f680",
     "unlock_type": "drills", "unlock_value": 5},
    {"name": "Drill Master", "description": "Complete 50 drills", "icon": "\U0001f3af",
     "unlock_type": "drills", "unlock_value": 50},
    {"name": "Century Club", "description": "Complete 100 drills", "icon": "\U0001f4af",
     "unlock_type": "drills", "unlock_value": 100},
    # Rep count
    {"name": "Rep Rookie", "description": "Log 100 total reps", "icon": "\U0001f4aa",
     "unlock_type": "reps", "unlock_value": 100},
    {"name": "Rep Warrior", "description": "Log 500 total reps", "icon": "⚔️",
     "unlock_type": "reps", "unlock_value": 500},
    {"name": "Rep Legend", "description": "Log 1,000 total reps", "icon": "\U0001f3c6",
     "unlock_type": "reps", "unlock_value": 1000},
    {"name": "Rep Goat", "description": "Log 5,000 total reps", "icon": "\U0001f410",
     "unlock_type": "reps", "unlock_value": 5000},
    # Streaks
    {"name": "On Fire", "description": "Train 3 days in a row", "icon": "\U0001f525",
     "unlock_type": "streak", "unlock_value": 3},
    {"name": "Week Warrior", "description": "Train 7 days in a row", "icon": "\U0001f4c5",
     "unlock_type": "streak", "unlock_value": 7},
    {"name": "Unstoppable", "description": "Train 30 days in a row", "icon": "\U0001f6e1️",
     "unlock_type": "streak", "unlock_value": 30},
    # Levels
    {"name": "Level Up", "description": "Reach level 1", "icon": "⬆️",
     "unlock_type": "level", "unlock_value": 1},
    {"name": "Double Digits", "description": "Reach level 10", "icon": "\U0001f51f",
     "unlock_type": "level", "unlock_value": 10},
    # Special
    {"name": "6 7", "description": "Log exactly 67 reps in one drill", "icon": "6️⃣7️⃣",
     "unlock_type": "special"},
    {"name": "Lucky 77", "description": "Log exactly 77 reps in one drill", "icon": "\U0001f340",
     "unlock_type": "special"},
    {"name": "Lucky 67", "description": "Have a point total containing 67", "icon": "\U0001f3b2",
     "unlock_type": "special"},
    {"name": "Early Bird", "description": "Finish a drill before 6 AM", "icon": "\U0001f305",
     "unlock_type": "special"},
    {"name": "Night Owl", "description": "Finish a drill after 10 PM", "icon": "\U0001f989",
     "unlock_type": "special"},
    {"name": "Hat Trick", "description": "Complete 3 drills in one day", "icon": "\U0001f3a9",
     "unlock_type": "special"},
    {"name": "Marathon", "description": "Complete 10 drills in one day", "icon": "\U0001f3c3",
     "unlock_type": "special"},
    {"name": "Weekend Warrior", "description": "Train on a Saturday and on a Sunday", "icon": "\U0001f3d6️",
     "unlock_type": "special"},
    {"name": "Double Down", "description": "Repeat the same drill on the same day", "icon": "✌️",
     "unlock_type": "special"},
    {"name": "Comeback Kid", "description": "Come back after a week off", "icon": "\U0001f504",
     "unlock_type": "special"},
    {"name": "Social Star", "description": "Share your progress", "icon": "\U0001f31f",
     "unlock_type": "special"},
]


async def seed_badges(db: AsyncSession) -> int:
    """Insert catalog entries that are missing by name. Returns number inserted."""
    result = await db.execute(select(Badge.name))
    existing = set(result.scalars())

    inserted = 0
    for sort_order, badge_data in enumerate(BADGE_SEED_DATA, start=1):
        if badge_data["name"] in existing:
            continue
        db.add(Badge(sort_order=sort_order, **badge_data))
        inserted += 1

    await db.commit()
    logger.info("Seeded %d badge definitions", inserted)
    return inserted
