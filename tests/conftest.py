"""Shared test fixtures.

Tests run against an in-memory SQLite database (aiosqlite) so no PostgreSQL
or Redis is needed; every fixture invocation gets a fresh database.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from datetime import datetime, timezone

os.environ["REPQUEST_DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["REPQUEST_REDIS_URL"] = ""
os.environ["REPQUEST_LOG_FORMAT"] = "console"
os.environ["REPQUEST_TIMEZONE"] = "UTC"

import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from repquest.config import get_settings  # noqa: E402
from repquest.database import close_db, create_tables, get_session, init_db  # noqa: E402
from repquest.db.models import Drill, DrillResult, User  # noqa: E402
from repquest.gamification.seed import seed_badges  # noqa: E402
from repquest.main import create_app  # noqa: E402

get_settings.cache_clear()


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh database with tables created; yields a session for setup and assertions."""
    settings = get_settings()
    await init_db(settings.database_url)
    await create_tables()
    async for session in get_session():
        yield session
        break
    await close_db()


@pytest_asyncio.fixture
async def seeded_db(db_session: AsyncSession) -> AsyncSession:
    """Database with the badge catalog seeded."""
    await seed_badges(db_session)
    return db_session


@pytest_asyncio.fixture
async def client(seeded_db: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP test client sharing the seeded database."""
    app = create_app()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


async def create_user(db: AsyncSession, total_points: int = 0, name: str = "Jordan") -> User:
    """Helper to insert a player."""
    user = User(display_name=name, total_points=total_points)
    db.add(user)
    await db.commit()
    return user


async def create_drill(
    db: AsyncSession,
    name: str = "Push-ups",
    points_per_rep: int = 1,
    points_for_completion: int = 0,
    daily_limit: bool = False,
) -> Drill:
    """Helper to insert a drill."""
    drill = Drill(
        name=name,
        drill_type="reps",
        points_per_rep=points_per_rep,
        points_for_completion=points_for_completion,
        daily_limit=daily_limit,
    )
    db.add(drill)
    await db.commit()
    return drill


async def add_result(
    db: AsyncSession, user: User, drill: Drill, reps: int, completed_at: datetime
) -> DrillResult:
    """Helper to insert a historical drill result directly."""
    result = DrillResult(
        user_id=user.id,
        drill_id=drill.id,
        drill_name=drill.name,
        reps=reps,
        points=reps * drill.points_per_rep,
        completed_at=completed_at,
    )
    db.add(result)
    await db.commit()
    return result


def utc(*args: int) -> datetime:
    """Shorthand for an aware UTC datetime."""
    return datetime(*args, tzinfo=timezone.utc)
