"""Level, tier and points-to-next-level computation.

Levels are a flat 1000 points each. Tiers are cosmetic bands over levels and
MUST stay sorted by ``min_level`` descending: lookup is first-match, which is
what lets "The 67" cover levels 67-99 and shadow Gold there.
"""

from __future__ import annotations

from dataclasses import dataclass

POINTS_PER_LEVEL = 1000

LEVEL_TIERS: list[dict] = [
    {"name": "Diamond", "min_level": 100, "color": "#60A5FA", "emoji": "\U0001f48e"},
    {"name": "The 67", "min_level": 67, "color": "#F59E0B", "emoji": "6️⃣7️⃣"},
    {"name": "Gold", "min_level": 50, "color": "#FBBF24", "emoji": "\U0001f947"},
    {"name": "Silver", "min_level": 20, "color": "#D1D5DB", "emoji": "\U0001f948"},
    {"name": "Bronze", "min_level": 10, "color": "#CD7F32", "emoji": "\U0001f949"},
    {"name": "Rookie", "min_level": 0, "color": "#9CA3AF", "emoji": "⭐"},
]


def calculate_level(points: int) -> int:
    """Return the level for a point total (1000 points per level)."""
    if points < 0:
        msg = f"points must be non-negative, got {points}"
        raise ValueError(msg)
    return points // POINTS_PER_LEVEL


def points_to_next_level(points: int) -> int:
    """Points still needed to reach the next level. Always > 0."""
    return (calculate_level(points) + 1) * POINTS_PER_LEVEL - points


def tier_for_level(level: int) -> dict:
    """Return a copy of the tier (name, color, emoji, min_level) for a level."""
    for tier in LEVEL_TIERS:
        if level >= tier["min_level"]:
            return dict(tier)
    return dict(LEVEL_TIERS[-1])


def check_special_value(value: object) -> bool:
    """True if the decimal representation of ``value`` contains "67"."""
    return "67" in str(value)


def compute_level(points: int) -> dict:
    """Compute full level info for a point total."""
    level = calculate_level(points)
    return {
        "points": points,
        "level": level,
        "tier": tier_for_level(level),
        "points_into_level": points - level * POINTS_PER_LEVEL,
        "points_to_next_level": points_to_next_level(points),
        "next_level": level + 1,
        "is_special": check_special_value(points),
    }


@dataclass(frozen=True)
class LevelUp:
    old_level: int
    new_level: int
    old_tier: str
    new_tier: str

    @property
    def tier_changed(self) -> bool:
        return self.old_tier != self.new_tier


def detect_level_up(old_points: int, new_points: int) -> LevelUp | None:
    """Compare two point totals and report a level-up, if any."""
    old_level = calculate_level(old_points)
    new_level = calculate_level(new_points)
    if new_level <= old_level:
        return None
    return LevelUp(
        old_level=old_level,
        new_level=new_level,
        old_tier=tier_for_level(old_level)["name"],
        new_tier=tier_for_level(new_level)["name"],
    )
