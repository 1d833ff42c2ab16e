"""Redis-backed cache layer: namespaces, cache service, invalidation, warmup."""

from .client import create_redis_client
from .invalidation import CacheInvalidationService
from .namespaces import (
    ALL_RECORDS_KEY,
    ARTICLE_CACHES,
    CATEGORY_CACHES,
    NAMESPACE_REGISTRY,
    CacheNamespaces,
    all_namespaces,
    dto_key,
    entity_key,
)
from .service import CacheService, CacheStats, DisabledCacheService, RedisCacheService
from .warmup import CacheWarmupService, WarmupTarget

__all__ = [
    "ALL_RECORDS_KEY",
    "ARTICLE_CACHES",
    "CATEGORY_CACHES",
    "NAMESPACE_REGISTRY",
    "CacheInvalidationService",
    "CacheNamespaces",
    "CacheService",
    "CacheStats",
    "CacheWarmupService",
    "DisabledCacheService",
    "RedisCacheService",
    "WarmupTarget",
    "all_namespaces",
    "create_redis_client",
    "dto_key",
    "entity_key",
]
