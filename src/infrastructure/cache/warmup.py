"""Cache warmup: preload every record of a type into its namespaces.

Warming a record type clears its four namespaces, loads the full record set
and bulk-writes the dto_ entries by id, name and path plus the full list
under dto_all.  Startup warmup runs once per process, one task per record
type, and returns only after every task has finished.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

from src.infrastructure.settings import CacheSettings

from .namespaces import ALL_RECORDS_KEY, CacheNamespaces, dto_key
from .service import CacheService

logger = logging.getLogger(__name__)

WARM_ALL = "all"

# Returns every record of one type as transfer objects carrying id, name and path.
Loader = Callable[[], Awaitable[Sequence[Any]]]


@dataclass(frozen=True)
class WarmupTarget:
    namespaces: CacheNamespaces
    loader: Loader

    @property
    def record_type(self) -> str:
        return self.namespaces.record_type


class CacheWarmupService:
    def __init__(
        self,
        cache: CacheService,
        settings: CacheSettings,
        targets: Sequence[WarmupTarget],
    ) -> None:
        self._cache = cache
        self._settings = settings
        self._targets = {target.record_type: target for target in targets}
        self._started = False
        self._lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._started

    async def warm_up_on_startup(self) -> dict[str, int]:
        """Warm every type with warmup_on_startup set.  Later calls do nothing."""
        async with self._lock:
            if self._started:
                logger.debug("Startup cache warmup already ran, skipping")
                return {}
            self._started = True

        if not self._settings.enabled:
            logger.info("Redis caching is disabled, skipping cache warmup")
            return {}

        selected = [
            record_type
            for record_type in self._targets
            if self._settings.for_record_type(record_type).warmup_on_startup
        ]
        for record_type in self._targets.keys() - set(selected):
            logger.debug("%s cache warmup disabled", record_type.capitalize())

        logger.info("Starting cache warmup process for %s", selected)
        counts = await self._warm_many(selected)
        logger.info("Cache warmup process completed: %s", counts)
        return counts

    async def warm_up(self, record_type: str) -> int:
        """Rebuild the caches of one record type; returns the number of records cached."""
        target = self._targets.get(record_type)
        if target is None:
            logger.warning("Unknown entity type for cache warmup: %s", record_type)
            return 0

        namespaces = target.namespaces
        logger.info("Warming up %s caches...", record_type)
        await self._cache.evict_all(*namespaces.names)

        try:
            records = list(await target.loader())
        except Exception:
            logger.exception("Error loading %s records for cache warmup", record_type)
            return 0
        logger.info("Loaded %d %s records for cache warmup", len(records), record_type)

        by_id: dict[str, Any] = {}
        by_name: dict[str, Any] = {}
        by_path: dict[str, Any] = {}
        for record in records:
            by_id[dto_key(record.id)] = record
            by_name[dto_key(record.name)] = record
            by_path[dto_key(record.path)] = record

        await self._cache.warm_up(namespaces.by_id, by_id)
        await self._cache.warm_up(namespaces.by_name, by_name)
        await self._cache.warm_up(namespaces.by_path, by_path)
        await self._cache.put(namespaces.all_records, ALL_RECORDS_KEY, records)

        logger.info("%s cache warmup completed: %d records cached", record_type, len(records))
        return len(records)

    async def warm_up_entity_cache(self, entity_type: str) -> dict[str, int]:
        """Manual trigger: a record type name, or "all" for every type."""
        requested = entity_type.lower()
        logger.info("Manual cache warmup requested for entity type: %s", requested)
        if requested == WARM_ALL:
            return await self._warm_many(list(self._targets))
        return {requested: await self.warm_up(requested)}

    async def warmup_status(self) -> dict[str, Any]:
        status: dict[str, Any] = {}
        for record_type, target in self._targets.items():
            status[f"{record_type}_cache_size"] = await self._cache.size(target.namespaces.by_id)
            status[f"{record_type}_warmup_enabled"] = self._settings.for_record_type(
                record_type
            ).warmup_on_startup
        status["startup_warmup_ran"] = self._started
        status["status"] = "healthy" if await self._cache.ping() else "unavailable"
        return status

    async def _warm_many(self, record_types: Sequence[str]) -> dict[str, int]:
        counts = await asyncio.gather(*(self.warm_up(rt) for rt in record_types))
        return dict(zip(record_types, counts))
