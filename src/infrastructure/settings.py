"""Runtime configuration for the cache, update engine and application.

Each group reads its own environment prefix (and the local .env file):

    CACHE_ENABLED=false
    CACHE_REDIS_URL=redis://cache:6379/2
    CACHE_ENTITIES__ARTICLE__TTL=600
    UPDATE_MAX_RETRY_ATTEMPTS=5
    APP_LOG_LEVEL=DEBUG
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

HOUR = 3600


class EntityCacheSettings(BaseModel):
    ttl: int = Field(default=HOUR, gt=0)
    warmup_on_startup: bool = False


def _default_entities() -> dict[str, EntityCacheSettings]:
    return {
        "category": EntityCacheSettings(ttl=24 * HOUR),
        "article": EntityCacheSettings(ttl=6 * HOUR),
    }


class CacheSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CACHE_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    enabled: bool = True
    redis_url: str = "redis://localhost:6379/0"
    key_prefix: str = "catalog"
    key_separator: str = ":"
    default_ttl: int = Field(default=HOUR, gt=0)
    entities: dict[str, EntityCacheSettings] = Field(default_factory=_default_entities)

    def for_record_type(self, record_type: str) -> EntityCacheSettings:
        """Per-type settings, falling back to default_ttl with warmup off."""
        configured = self.entities.get(record_type)
        if configured is None:
            return EntityCacheSettings(ttl=self.default_ttl)
        return configured

    def ttl_for(self, record_type: str | None) -> int:
        if record_type is None:
            return self.default_ttl
        return self.for_record_type(record_type).ttl


class UpdateSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="UPDATE_", env_file=".env", extra="ignore")

    max_retry_attempts: int = Field(default=3, ge=1, le=10)
    retry_backoff_initial: float = Field(default=0.01, ge=0)
    retry_backoff_max: float = Field(default=0.2, ge=0)
    strict_boolean_coercion: bool = True


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="APP_", env_file=".env", extra="ignore")

    log_level: str = "INFO"
    actor: str = "system"


@lru_cache
def get_cache_settings() -> CacheSettings:
    return CacheSettings()


@lru_cache
def get_update_settings() -> UpdateSettings:
    return UpdateSettings()


@lru_cache
def get_app_settings() -> AppSettings:
    return AppSettings()
