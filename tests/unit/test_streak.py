"""Daily streak and stats counter tests."""

from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from repquest.db.models import User, UserStats
from repquest.gamification.stats_service import advance_streak, local_date, record_completion, snapshot


def fresh_stats(**kwargs) -> UserStats:
    values = {"user_id": 1, "total_reps": 0, "sessions_completed": 0, "current_streak": 0, "longest_streak": 0}
    values.update(kwargs)
    return UserStats(**values)


class TestLocalDate:
    """Calendar date in the configured timezone."""

    def test_utc(self):
        assert local_date(datetime(2024, 1, 5, 23, 30, tzinfo=timezone.utc)) == date(2024, 1, 5)

    def test_shifted_timezone(self):
        ts = datetime(2024, 1, 6, 2, 0, tzinfo=timezone.utc)
        assert local_date(ts, ZoneInfo("America/Chicago")) == date(2024, 1, 5)

    def test_naive_is_utc(self):
        assert local_date(datetime(2024, 1, 5, 23, 30), ZoneInfo("Europe/Berlin")) == date(2024, 1, 6)


class TestAdvanceStreak:
    """Consecutive-day streak rules."""

    def test_first_activity_starts_streak(self):
        stats = fresh_stats()
        advance_streak(stats, date(2024, 1, 5))
        assert stats.current_streak == 1
        assert stats.longest_streak == 1
        assert stats.last_active_date == date(2024, 1, 5)

    def test_same_day_does_not_extend(self):
        stats = fresh_stats(current_streak=2, longest_streak=2, last_active_date=date(2024, 1, 5))
        advance_streak(stats, date(2024, 1, 5))
        assert stats.current_streak == 2

    def test_next_day_extends(self):
        stats = fresh_stats(current_streak=2, longest_streak=2, last_active_date=date(2024, 1, 5))
        advance_streak(stats, date(2024, 1, 6))
        assert stats.current_streak == 3
        assert stats.longest_streak == 3

    def test_gap_resets_but_keeps_longest(self):
        stats = fresh_stats(current_streak=5, longest_streak=5, last_active_date=date(2024, 1, 5))
        advance_streak(stats, date(2024, 1, 8))
        assert stats.current_streak == 1
        assert stats.longest_streak == 5

    def test_month_boundary(self):
        stats = fresh_stats(current_streak=1, longest_streak=1, last_active_date=date(2024, 1, 31))
        advance_streak(stats, date(2024, 2, 1))
        assert stats.current_streak == 2

    def test_earlier_day_ignored(self):
        stats = fresh_stats(current_streak=3, longest_streak=3, last_active_date=date(2024, 1, 5))
        advance_streak(stats, date(2024, 1, 2))
        assert stats.current_streak == 3
        assert stats.last_active_date == date(2024, 1, 5)


class TestRecordCompletion:
    """Counters are additive."""

    def test_counters_accumulate(self):
        stats = fresh_stats()
        now = datetime(2024, 1, 5, 12, tzinfo=timezone.utc)
        record_completion(stats, 25, date(2024, 1, 5), now)
        record_completion(stats, 40, date(2024, 1, 5), now)
        assert stats.total_reps == 65
        assert stats.sessions_completed == 2
        assert stats.current_streak == 1
        assert stats.updated_at == now


class TestSnapshot:
    def test_without_stats_row(self):
        snap = snapshot(None, User(id=1, total_points=420))
        assert snap.total_points == 420
        assert snap.sessions_completed == 0

    def test_with_stats_row(self):
        stats = fresh_stats(total_reps=300, sessions_completed=12, current_streak=4)
        snap = snapshot(stats, User(id=1, total_points=5000))
        assert (snap.total_reps, snap.sessions_completed, snap.current_streak, snap.total_points) == (
            300, 12, 4, 5000,
        )
