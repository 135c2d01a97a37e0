"""Badge eligibility engine — evaluates a user's stats and history against the catalog."""

from __future__ import annotations

from datetime import timezone, tzinfo

import structlog

from repquest.gamification.leveling import calculate_level
from repquest.gamification.special_badges import SPECIAL_BADGES, BadgeContext, SpecialPredicate
from repquest.gamification.store import BadgeRecord, BadgeStore, CompletionRecord, StatsSnapshot

logger = structlog.get_logger(__name__)

THRESHOLD_RULES = {
    "streak": lambda stats: stats.current_streak,
    "reps": lambda stats: stats.total_reps,
    "drills": lambda stats: stats.sessions_completed,
    "level": lambda stats: calculate_level(stats.total_points),
}


class BadgeEngine:
    """Finds badges a user newly qualifies for and records the unlocks.

    Badge checking is auxiliary to the completion flow, so nothing raised by
    the store escapes :meth:`check_badge_unlocks`: a failed fetch yields no
    unlocks and a failed insert drops only that badge.
    """

    def __init__(
        self,
        store: BadgeStore,
        tz: tzinfo = timezone.utc,
        special_rules: dict[str, SpecialPredicate] | None = None,
    ) -> None:
        self.store = store
        self.tz = tz
        self.special_rules = SPECIAL_BADGES if special_rules is None else special_rules

    async def check_badge_unlocks(
        self,
        user_id: int,
        stats: StatsSnapshot,
        completions: list[CompletionRecord] | None = None,
    ) -> list[BadgeRecord]:
        """Evaluate every badge the user does not own yet.

        Returns the badges unlocked by this call (may be empty).
        """
        try:
            if completions is None:
                completions = await self.store.fetch_completions(user_id)
            owned = await self.store.fetch_owned_badge_ids(user_id)
            catalog = await self.store.fetch_badge_catalog()
        except Exception:
            logger.warning("badge_check_failed", user_id=user_id, exc_info=True)
            return []

        ctx = BadgeContext(stats=stats, completions=completions, tz=self.tz)
        candidates = [b for b in catalog if b.id not in owned]

        unlocked: list[BadgeRecord] = []
        for badge in candidates:
            if not self.is_eligible(badge, ctx):
                continue
            if await self._unlock(user_id, badge):
                unlocked.append(badge)

        logger.info(
            "badge_check_complete",
            user_id=user_id,
            candidates=len(candidates),
            unlocked=[b.name for b in unlocked],
        )
        return unlocked

    def is_eligible(self, badge: BadgeRecord, ctx: BadgeContext) -> bool:
        """Apply the rule for the badge's unlock type."""
        if badge.unlock_type == "special":
            predicate = self.special_rules.get(badge.name)
            if predicate is None:
                logger.warning("unknown_special_badge", badge=badge.name, decision="ineligible")
                return False
            return predicate(ctx)

        rule = THRESHOLD_RULES.get(badge.unlock_type)
        if rule is None:
            logger.warning(
                "unknown_unlock_type",
                badge=badge.name,
                unlock_type=badge.unlock_type,
                decision="ineligible",
            )
            return False
        return rule(ctx.stats) >= badge.unlock_value

    async def _unlock(self, user_id: int, badge: BadgeRecord) -> bool:
        try:
            inserted = await self.store.insert_unlock(user_id, badge.id)
        except Exception:
            logger.warning(
                "badge_unlock_failed", user_id=user_id, badge=badge.name, decision="skipped", exc_info=True
            )
            return False

        if not inserted:
            logger.info("badge_unlock_rejected", user_id=user_id, badge=badge.name, decision="already_owned")
            return False

        logger.info("badge_unlocked", user_id=user_id, badge=badge.name, decision="unlocked")
        return True
