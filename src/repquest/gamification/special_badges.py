"""Special badge predicates, dispatched by badge name.

New special badges are added by registering a predicate here with
``@special_badge("Badge Name")``; the engine looks them up by name.
Day and hour rules use the configured local timezone.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

from repquest.gamification.leveling import check_special_value
from repquest.gamification.store import CompletionRecord, StatsSnapshot

SATURDAY = 5
SUNDAY = 6
COMEBACK_GAP = timedelta(days=7)


@dataclass(frozen=True)
class BadgeContext:
    """Everything a special predicate may look at."""

    stats: StatsSnapshot
    completions: list[CompletionRecord] = field(default_factory=list)
    tz: tzinfo = timezone.utc

    def local_time(self, record: CompletionRecord) -> datetime:
        ts = record.completed_at
        if ts.tzinfo is None:
            ts = ts.replace(tzinfo=timezone.utc)
        return ts.astimezone(self.tz)

    def local_times(self) -> list[datetime]:
        return [self.local_time(r) for r in self.completions]


SpecialPredicate = Callable[[BadgeContext], bool]

SPECIAL_BADGES: dict[str, SpecialPredicate] = {}


def special_badge(name: str) -> Callable[[SpecialPredicate], SpecialPredicate]:
    """Register a predicate for the special badge called ``name``."""

    def register(fn: SpecialPredicate) -> SpecialPredicate:
        SPECIAL_BADGES[name] = fn
        return fn

    return register


def _max_per_day(ctx: BadgeContext) -> int:
    per_day = Counter(ts.date() for ts in ctx.local_times())
    return max(per_day.values(), default=0)


@special_badge("6 7")
def has_67_reps(ctx: BadgeContext) -> bool:
    return any(r.reps == 67 for r in ctx.completions)


@special_badge("Lucky 77")
def has_77_reps(ctx: BadgeContext) -> bool:
    return any(r.reps == 77 for r in ctx.completions)


@special_badge("Lucky 67")
def has_67_in_points(ctx: BadgeContext) -> bool:
    return check_special_value(ctx.stats.total_points)


@special_badge("Early Bird")
def is_early_bird(ctx: BadgeContext) -> bool:
    """Completed a drill before 6 AM."""
    return any(ts.hour < 6 for ts in ctx.local_times())


@special_badge("Night Owl")
def is_night_owl(ctx: BadgeContext) -> bool:
    """Completed a drill at or after 10 PM."""
    return any(ts.hour >= 22 for ts in ctx.local_times())


@special_badge("Hat Trick")
def is_hat_trick(ctx: BadgeContext) -> bool:
    return _max_per_day(ctx) >= 3


@special_badge("Marathon")
def is_marathon(ctx: BadgeContext) -> bool:
    return _max_per_day(ctx) >= 10


@special_badge("Weekend Warrior")
def is_weekend_warrior(ctx: BadgeContext) -> bool:
    """A Saturday and a Sunday completion, not necessarily the same weekend."""
    weekdays = {ts.weekday() for ts in ctx.local_times()}
    return SATURDAY in weekdays and SUNDAY in weekdays


@special_badge("Double Down")
def is_double_down(ctx: BadgeContext) -> bool:
    """Same drill completed twice on one day."""
    seen: set[tuple] = set()
    for record in ctx.completions:
        key = (ctx.local_time(record).date(), record.drill_id)
        if key in seen:
            return True
        seen.add(key)
    return False


@special_badge("Comeback Kid")
def is_comeback(ctx: BadgeContext) -> bool:
    """Returned after a break of at least a week."""
    times = sorted(ctx.local_times())
    return any(later - earlier >= COMEBACK_GAP for earlier, later in zip(times, times[1:]))


@special_badge("Social Star")
def is_social_star(_ctx: BadgeContext) -> bool:
    # TODO: unlock once share events are recorded per user
    return False
