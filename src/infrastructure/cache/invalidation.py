"""Cache invalidation for mutated records.

After a write, every cached alias of the record must go: the by-id entries,
the by-name and by-path entries under both the old and the new natural keys
(a rename must not leave the old name resolvable), both the dto_ and the
entity_ representations, and the all-records list.

Invalidation never raises.  A failed eviction is logged by the cache and
reported through the boolean result; the write that triggered it stands.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any
from uuid import UUID

from .namespaces import (
    ARTICLE_CACHES,
    CATEGORY_CACHES,
    NAMESPACE_REGISTRY,
    CacheNamespaces,
    all_namespaces,
    dto_key,
    entity_key,
)
from .service import CacheService

logger = logging.getLogger(__name__)

HEALTH_CHECK_KEY = "health_check"


def _distinct(values: Iterable[str | None]) -> list[str]:
    seen: dict[str, None] = {}
    for value in values:
        if value is not None:
            seen.setdefault(value, None)
    return list(seen)


def _both_forms(key: object) -> list[str]:
    return [entity_key(key), dto_key(key)]


class CacheInvalidationService:
    def __init__(self, cache: CacheService) -> None:
        self._cache = cache

    async def invalidate(
        self,
        namespaces: CacheNamespaces,
        record_id: UUID | None,
        names: Iterable[str | None] = (),
        paths: Iterable[str | None] = (),
    ) -> bool:
        """Evict every alias of one record; True when every eviction succeeded."""
        results: list[bool] = []
        if record_id is not None:
            results.append(await self._cache.evict_keys(namespaces.by_id, _both_forms(record_id)))
        for name in _distinct(names):
            results.append(await self._cache.evict_keys(namespaces.by_name, _both_forms(name)))
        for path in _distinct(paths):
            results.append(await self._cache.evict_keys(namespaces.by_path, _both_forms(path)))
        results.append(await self._cache.evict_all(namespaces.all_records))

        ok = all(results)
        if ok:
            logger.info(
                "Invalidated %s caches for id: %s, names: %s, paths: %s",
                namespaces.record_type,
                record_id,
                _distinct(names),
                _distinct(paths),
            )
        else:
            logger.error("Partial cache invalidation for %s %s", namespaces.record_type, record_id)
        return ok

    async def invalidate_record(
        self, namespaces: CacheNamespaces, current: Any, previous: Any = None
    ) -> bool:
        """Invalidate using the natural keys of the current and previous state."""
        states = [s for s in (current, previous) if s is not None]
        record_id = next((s.id for s in states if s.id is not None), None)
        return await self.invalidate(
            namespaces,
            record_id,
            names=[getattr(s, "name", None) for s in states],
            paths=[getattr(s, "path", None) for s in states],
        )

    async def invalidate_category_caches(
        self, category_id: UUID | None, name: str | None = None, path: str | None = None
    ) -> bool:
        return await self.invalidate(CATEGORY_CACHES, category_id, [name], [path])

    async def invalidate_article_caches(
        self, article_id: UUID | None, name: str | None = None, path: str | None = None
    ) -> bool:
        return await self.invalidate(ARTICLE_CACHES, article_id, [name], [path])

    async def invalidate_all_master_data_caches(self) -> bool:
        ok = await self._cache.evict_all(*all_namespaces())
        logger.info("Invalidated all master data caches")
        return ok

    async def invalidate_by_pattern(self, namespace: str, pattern: str) -> int:
        """Evict keys in namespace matching a glob pattern; returns how many."""
        matched = await self._cache.keys(namespace, pattern)
        if matched and not await self._cache.evict_keys(namespace, matched):
            return 0
        logger.info("Invalidated %d keys in %s matching %r", len(matched), namespace, pattern)
        return len(matched)

    async def log_cache_statistics(self) -> dict[str, int]:
        sizes: dict[str, int] = {}
        for namespaces in NAMESPACE_REGISTRY.values():
            for name in namespaces.names:
                sizes[name] = await self._cache.size(name)
            logger.info(
                "%s caches - Main: %d, ByName: %d, ByPath: %d, All: %d",
                namespaces.record_type.capitalize(),
                sizes[namespaces.by_id],
                sizes[namespaces.by_name],
                sizes[namespaces.by_path],
                sizes[namespaces.all_records],
            )
        return sizes

    async def is_healthy(self) -> bool:
        """Round-trip a probe key through the cache."""
        namespace = CATEGORY_CACHES.by_id
        if not await self._cache.put(namespace, HEALTH_CHECK_KEY, "ok", ttl=60):
            return False
        exists = await self._cache.has_key(namespace, HEALTH_CHECK_KEY)
        await self._cache.evict(namespace, HEALTH_CHECK_KEY)
        return exists
