"""SqlBadgeStore tests against a real (SQLite) database."""

from __future__ import annotations

import pytest
from sqlalchemy import func, select, text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from repquest.db.models import Badge, UserBadge
from repquest.gamification.badge_engine import BadgeEngine
from repquest.gamification.seed import BADGE_SEED_DATA, seed_badges
from repquest.gamification.store import SqlBadgeStore, StatsSnapshot
from tests.conftest import add_result, create_drill, create_user, utc


async def get_badge(db: AsyncSession, name: str) -> Badge:
    return (await db.execute(select(Badge).where(Badge.name == name))).scalar_one()


async def break_inserts_for(db: AsyncSession, badge_id: int) -> None:
    """Make inserting this badge fail with a non-constraint database error."""
    await db.execute(
        text(
            "CREATE TRIGGER fail_badge_insert BEFORE INSERT ON user_badges "
            f"WHEN NEW.badge_id = {badge_id} BEGIN SELECT no_such_function(); END"
        )
    )
    await db.commit()


class TestSeed:
    """Catalog seeding is idempotent."""

    async def test_seeds_full_catalog(self, db_session):
        inserted = await seed_badges(db_session)
        assert inserted == len(BADGE_SEED_DATA)

    async def test_second_seed_inserts_nothing(self, seeded_db):
        assert await seed_badges(seeded_db) == 0
        count = (await seeded_db.execute(select(func.count()).select_from(Badge))).scalar_one()
        assert count == len(BADGE_SEED_DATA)

    async def test_special_badges_have_no_threshold(self, seeded_db):
        badge = await get_badge(seeded_db, "Hat Trick")
        assert badge.unlock_type == "special"
        assert badge.unlock_value == 0


class TestSqlBadgeStore:
    """The four store operations."""

    async def test_fetch_completions_sorted(self, seeded_db):
        user = await create_user(seeded_db)
        drill = await create_drill(seeded_db)
        await add_result(seeded_db, user, drill, 20, utc(2024, 1, 7, 9))
        await add_result(seeded_db, user, drill, 67, utc(2024, 1, 5, 9))

        records = await SqlBadgeStore(seeded_db).fetch_completions(user.id)
        assert [r.reps for r in records] == [67, 20]
        assert records[0].drill_id == drill.id

    async def test_fetch_completions_only_for_user(self, seeded_db):
        user = await create_user(seeded_db)
        other = await create_user(seeded_db, name="Sam")
        drill = await create_drill(seeded_db)
        await add_result(seeded_db, other, drill, 20, utc(2024, 1, 7, 9))

        assert await SqlBadgeStore(seeded_db).fetch_completions(user.id) == []

    async def test_catalog_in_seed_order(self, seeded_db):
        catalog = await SqlBadgeStore(seeded_db).fetch_badge_catalog()
        assert [b.name for b in catalog] == [d["name"] for d in BADGE_SEED_DATA]

    async def test_insert_and_fetch_owned(self, seeded_db):
        user = await create_user(seeded_db)
        badge = await get_badge(seeded_db, "First Steps")
        store = SqlBadgeStore(seeded_db)

        assert await store.insert_unlock(user.id, badge.id) is True
        assert await store.fetch_owned_badge_ids(user.id) == {badge.id}

    async def test_duplicate_insert_rejected_by_constraint(self, seeded_db):
        user_id = (await create_user(seeded_db)).id
        badge_id = (await get_badge(seeded_db, "First Steps")).id
        store = SqlBadgeStore(seeded_db)

        assert await store.insert_unlock(user_id, badge_id) is True
        assert await store.insert_unlock(user_id, badge_id) is False

        count = (
            await seeded_db.execute(
                select(func.count()).select_from(UserBadge).where(UserBadge.user_id == user_id)
            )
        ).scalar_one()
        assert count == 1

    async def test_rejected_insert_keeps_earlier_unlocks(self, seeded_db):
        user_id = (await create_user(seeded_db)).id
        first_id = (await get_badge(seeded_db, "First Steps")).id
        second_id = (await get_badge(seeded_db, "Getting Started")).id
        store = SqlBadgeStore(seeded_db)

        await store.insert_unlock(user_id, first_id)
        await store.insert_unlock(user_id, first_id)
        await store.insert_unlock(user_id, second_id)

        assert await store.fetch_owned_badge_ids(user_id) == {first_id, second_id}

    async def test_database_error_does_not_poison_session(self, seeded_db):
        user_id = (await create_user(seeded_db)).id
        broken_id = (await get_badge(seeded_db, "First Steps")).id
        next_id = (await get_badge(seeded_db, "Getting Started")).id
        await break_inserts_for(seeded_db, broken_id)
        store = SqlBadgeStore(seeded_db)

        with pytest.raises(OperationalError):
            await store.insert_unlock(user_id, broken_id)

        assert await store.insert_unlock(user_id, next_id) is True
        assert await store.fetch_owned_badge_ids(user_id) == {next_id}


class TestEngineWithSqlStore:
    """End-to-end engine runs over the SQL store."""

    async def test_unlocks_persist_and_second_run_is_empty(self, seeded_db):
        user = await create_user(seeded_db)
        drill = await create_drill(seeded_db)
        for hour in (8, 12, 18):
            await add_result(seeded_db, user, drill, 10, utc(2024, 1, 5, hour))
        user_id = user.id

        engine = BadgeEngine(SqlBadgeStore(seeded_db))
        stats = StatsSnapshot(sessions_completed=3, total_reps=30, current_streak=1, total_points=30)

        first = await engine.check_badge_unlocks(user_id, stats)
        assert {b.name for b in first} == {"First Steps", "Hat Trick", "Double Down"}

        second = await engine.check_badge_unlocks(user_id, stats)
        assert second == []

    async def test_owned_badge_not_reunlocked(self, seeded_db):
        user = await create_user(seeded_db)
        badge = await get_badge(seeded_db, "Rep Goat")
        user_id = user.id
        await SqlBadgeStore(seeded_db).insert_unlock(user_id, badge.id)

        engine = BadgeEngine(SqlBadgeStore(seeded_db))
        unlocked = await engine.check_badge_unlocks(user_id, StatsSnapshot(total_reps=10_000), [])
        assert "Rep Goat" not in {b.name for b in unlocked}
        assert "Rep Legend" in {b.name for b in unlocked}

    async def test_engine_skips_only_the_failed_badge(self, seeded_db):
        user_id = (await create_user(seeded_db)).id
        broken_id = (await get_badge(seeded_db, "First Steps")).id
        await break_inserts_for(seeded_db, broken_id)

        engine = BadgeEngine(SqlBadgeStore(seeded_db))
        unlocked = await engine.check_badge_unlocks(user_id, StatsSnapshot(sessions_completed=5), [])

        assert {b.name for b in unlocked} == {"Getting Started"}
        assert broken_id not in await SqlBadgeStore(seeded_db).fetch_owned_badge_ids(user_id)
