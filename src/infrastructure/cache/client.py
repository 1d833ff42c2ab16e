"""Redis client factory."""

from __future__ import annotations

from redis.asyncio import Redis

from src.infrastructure.settings import CacheSettings


def create_redis_client(settings: CacheSettings) -> Redis:
    """Client for settings.redis_url; replies are decoded to str."""
    return Redis.from_url(settings.redis_url, decode_responses=True)
