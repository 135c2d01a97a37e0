"""Shared FastAPI dependencies."""

from collections.abc import AsyncGenerator
from datetime import tzinfo
from zoneinfo import ZoneInfo

from repquest.config import get_settings
from repquest.redis_client import get_redis as _get_redis


async def get_redis_dep() -> AsyncGenerator[object, None]:
    """Yield the Redis client (or None) as a FastAPI dependency."""
    yield _get_redis()


def get_timezone() -> tzinfo:
    """Local timezone for day and hour boundaries."""
    return ZoneInfo(get_settings().timezone)
