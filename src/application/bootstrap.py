"""Process startup wiring: logging, cache, warmup and per-session services.

    runtime = await startup()
    async with AsyncSessionLocal() as session, session.begin():
        services = runtime.services(session, actor="editor@example.com")
        await services.categories.partial_update(category_id, request)
    ...
    await runtime.shutdown()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.infrastructure.cache import (
    ARTICLE_CACHES,
    CATEGORY_CACHES,
    CacheInvalidationService,
    CacheService,
    CacheWarmupService,
    DisabledCacheService,
    RedisCacheService,
    WarmupTarget,
    create_redis_client,
)
from src.infrastructure.persistence.repositories import get_repositories
from src.infrastructure.settings import (
    AppSettings,
    CacheSettings,
    UpdateSettings,
    get_app_settings,
    get_cache_settings,
    get_update_settings,
)

from .services import ArticleService, CategoryService

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)


def build_cache_service(settings: CacheSettings) -> CacheService:
    if not settings.enabled:
        logger.info("Redis caching is disabled")
        return DisabledCacheService(settings)
    return RedisCacheService(create_redis_client(settings), settings)


def engine_options(settings: UpdateSettings) -> dict[str, Any]:
    """Keyword arguments for CrudService derived from UpdateSettings."""
    return {
        "max_retry_attempts": settings.max_retry_attempts,
        "retry_backoff_initial": settings.retry_backoff_initial,
        "retry_backoff_max": settings.retry_backoff_max,
        "strict_booleans": settings.strict_boolean_coercion,
    }


@dataclass
class CatalogServices:
    """Entity services bound to one session."""

    categories: CategoryService
    articles: ArticleService


def build_services(
    session: AsyncSession,
    cache: CacheService,
    *,
    update_settings: UpdateSettings | None = None,
    actor: str = "system",
    invalidation: CacheInvalidationService | None = None,
) -> CatalogServices:
    repos = get_repositories(session, actor)
    options = engine_options(update_settings or get_update_settings())
    invalidation = invalidation or CacheInvalidationService(cache)
    return CatalogServices(
        categories=CategoryService(repos.categories, cache, invalidation, **options),
        articles=ArticleService(repos.articles, cache, invalidation, **options),
    )


def build_warmup_service(
    session_factory: async_sessionmaker[AsyncSession],
    cache: CacheService,
    settings: CacheSettings,
) -> CacheWarmupService:
    """Warmup whose loaders each read through their own session, bypassing the cache."""

    async def load_categories() -> list[Any]:
        async with session_factory() as session:
            services = build_services(session, DisabledCacheService(settings))
            return await services.categories.find_all()

    async def load_articles() -> list[Any]:
        async with session_factory() as session:
            services = build_services(session, DisabledCacheService(settings))
            return await services.articles.find_all()

    return CacheWarmupService(
        cache,
        settings,
        [
            WarmupTarget(CATEGORY_CACHES, load_categories),
            WarmupTarget(ARTICLE_CACHES, load_articles),
        ],
    )


@dataclass
class CatalogRuntime:
    cache: CacheService
    invalidation: CacheInvalidationService
    warmup: CacheWarmupService
    update_settings: UpdateSettings
    app_settings: AppSettings

    def services(self, session: AsyncSession, actor: str | None = None) -> CatalogServices:
        return build_services(
            session,
            self.cache,
            update_settings=self.update_settings,
            actor=actor or self.app_settings.actor,
            invalidation=self.invalidation,
        )

    async def shutdown(self) -> None:
        await self.cache.close()
        logger.info("Catalog runtime shut down")


async def startup(
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    *,
    cache_settings: CacheSettings | None = None,
    update_settings: UpdateSettings | None = None,
    app_settings: AppSettings | None = None,
    cache: CacheService | None = None,
) -> CatalogRuntime:
    """Configure logging, build the cache, and run the one-time startup warmup."""
    app_settings = app_settings or get_app_settings()
    cache_settings = cache_settings or get_cache_settings()
    update_settings = update_settings or get_update_settings()
    configure_logging(app_settings.log_level)

    if session_factory is None:
        from src.infrastructure.database import AsyncSessionLocal

        session_factory = AsyncSessionLocal

    cache = cache or build_cache_service(cache_settings)
    warmup = build_warmup_service(session_factory, cache, cache_settings)
    await warmup.warm_up_on_startup()

    return CatalogRuntime(
        cache=cache,
        invalidation=CacheInvalidationService(cache),
        warmup=warmup,
        update_settings=update_settings,
        app_settings=app_settings,
    )
