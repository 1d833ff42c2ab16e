"""Namespaced key/value cache over Redis.

Keys are laid out as ``<prefix><sep><namespace><sep><key>`` (by default
``catalog:category_by_path:dto_/guides``).  Values are stored as JSON;
pydantic models are dumped with pydantic_core and read back through a
TypeAdapter when the caller names the expected type.

The cache is an accelerator, never a source of truth.  Every public
operation absorbs backend failures (RedisError) and undecodable payloads
(ValueError, which includes pydantic's ValidationError): the failure is
logged as a CacheOperationFailure and a neutral status is returned (False,
None, 0, an empty collection, or -2 for TTL lookups).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterable, Mapping
from functools import lru_cache
from typing import Any

from pydantic import BaseModel, ConfigDict, TypeAdapter, computed_field
from pydantic_core import from_json, to_json
from redis.asyncio import Redis
from redis.exceptions import RedisError

from src.domain.errors import CacheOperationFailure
from src.infrastructure.settings import CacheSettings

from .namespaces import record_type_of

logger = logging.getLogger(__name__)

# Redis TTL reply for a key that does not exist.
TTL_MISSING = -2
_DELETE_BATCH = 500


class CacheStats(BaseModel):
    model_config = ConfigDict(frozen=True)

    size: int
    hit_count: int
    miss_count: int

    @computed_field  # type: ignore[prop-decorator]
    @property
    def total_requests(self) -> int:
        return self.hit_count + self.miss_count

    @computed_field  # type: ignore[prop-decorator]
    @property
    def hit_rate(self) -> float:
        total = self.total_requests
        return self.hit_count / total if total else 0.0


@lru_cache(maxsize=None)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


def _encode(value: Any) -> bytes:
    return to_json(value)


def _decode(raw: str | bytes, type_: Any = None) -> Any:
    if type_ is None:
        return from_json(raw)
    return _adapter(type_).validate_json(raw)


class CacheService(ABC):
    """Namespaced cache API used by the entity services and warmup."""

    @abstractmethod
    def build_key(self, namespace: str, key: str) -> str: ...

    @abstractmethod
    async def put(self, namespace: str, key: str, value: Any, ttl: int | None = None) -> bool: ...

    @abstractmethod
    async def get(self, namespace: str, key: str, type_: Any = None) -> Any | None: ...

    @abstractmethod
    async def evict(self, namespace: str, key: str) -> bool: ...

    @abstractmethod
    async def evict_keys(self, namespace: str, keys: Iterable[str]) -> bool: ...

    @abstractmethod
    async def evict_all(self, *namespaces: str) -> bool:
        """Remove every entry in each namespace."""

    @abstractmethod
    async def has_key(self, namespace: str, key: str) -> bool: ...

    @abstractmethod
    async def keys(self, namespace: str, pattern: str = "*") -> set[str]:
        """Keys in namespace (without the prefix) matching a glob pattern."""

    @abstractmethod
    async def size(self, namespace: str) -> int: ...

    @abstractmethod
    async def put_all(
        self, namespace: str, entries: Mapping[str, Any], ttl: int | None = None
    ) -> bool: ...

    @abstractmethod
    async def get_all(
        self, namespace: str, keys: Iterable[str], type_: Any = None
    ) -> dict[str, Any]:
        """Cached values for the keys that hit; misses are simply absent."""

    @abstractmethod
    async def clear_all(self) -> bool: ...

    @abstractmethod
    async def stats(self, namespace: str) -> CacheStats: ...

    @abstractmethod
    async def set_ttl(self, namespace: str, key: str, seconds: int) -> bool: ...

    @abstractmethod
    async def get_ttl(self, namespace: str, key: str) -> int:
        """Remaining TTL in seconds; -1 without expiry, -2 when absent or on failure."""

    @abstractmethod
    async def ping(self) -> bool: ...

    async def warm_up(self, namespace: str, entries: Mapping[str, Any]) -> bool:
        logger.info("Warming up namespace %s with %d entries", namespace, len(entries))
        return await self.put_all(namespace, entries)

    async def close(self) -> None:
        """Release the backend connection, if any."""


class RedisCacheService(CacheService):
    def __init__(self, client: Redis, settings: CacheSettings) -> None:
        self._client = client
        self._settings = settings
        self._hits: defaultdict[str, int] = defaultdict(int)
        self._misses: defaultdict[str, int] = defaultdict(int)

    # ------------------------------------------------------------------ #
    # Key layout                                                           #
    # ------------------------------------------------------------------ #

    def build_key(self, namespace: str, key: str) -> str:
        sep = self._settings.key_separator
        return f"{self._settings.key_prefix}{sep}{namespace}{sep}{key}"

    def _namespace_prefix(self, namespace: str) -> str:
        return self.build_key(namespace, "")

    def _ttl(self, namespace: str) -> int:
        return self._settings.ttl_for(record_type_of(namespace))

    def _expiry(self, namespace: str, ttl: int | None) -> int:
        if ttl is None:
            return self._ttl(namespace)
        if ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl}")
        return ttl

    def _failed(
        self, operation: str, namespace: str | None, key: str | None, exc: Exception
    ) -> None:
        failure = CacheOperationFailure(operation, namespace, key, exc)
        logger.error("%s [%s]", failure.message, failure.error_code)

    async def _scan(self, match: str) -> list[str]:
        return [key async for key in self._client.scan_iter(match=match, count=_DELETE_BATCH)]

    async def _delete_matching(self, match: str) -> int:
        found = await self._scan(match)
        for start in range(0, len(found), _DELETE_BATCH):
            await self._client.delete(*found[start : start + _DELETE_BATCH])
        return len(found)

    # ------------------------------------------------------------------ #
    # Single-key operations                                                #
    # ------------------------------------------------------------------ #

    async def put(self, namespace: str, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            expiry = self._expiry(namespace, ttl)
            await self._client.set(self.build_key(namespace, key), _encode(value), ex=expiry)
        except (RedisError, ValueError) as exc:
            self._failed("put", namespace, key, exc)
            return False
        logger.debug("Cached %s/%s", namespace, key)
        return True

    async def get(self, namespace: str, key: str, type_: Any = None) -> Any | None:
        try:
            raw = await self._client.get(self.build_key(namespace, key))
            value = None if raw is None else _decode(raw, type_)
        except (RedisError, ValueError) as exc:
            self._failed("get", namespace, key, exc)
            value = None
        if value is None:
            self._misses[namespace] += 1
            logger.debug("Cache miss %s/%s", namespace, key)
        else:
            self._hits[namespace] += 1
            logger.debug("Cache hit %s/%s", namespace, key)
        return value

    async def evict(self, namespace: str, key: str) -> bool:
        try:
            await self._client.delete(self.build_key(namespace, key))
        except RedisError as exc:
            self._failed("evict", namespace, key, exc)
            return False
        logger.debug("Evicted %s/%s", namespace, key)
        return True

    async def has_key(self, namespace: str, key: str) -> bool:
        try:
            return bool(await self._client.exists(self.build_key(namespace, key)))
        except RedisError as exc:
            self._failed("has_key", namespace, key, exc)
            return False

    async def set_ttl(self, namespace: str, key: str, seconds: int) -> bool:
        try:
            return bool(await self._client.expire(self.build_key(namespace, key), seconds))
        except RedisError as exc:
            self._failed("set_ttl", namespace, key, exc)
            return False

    async def get_ttl(self, namespace: str, key: str) -> int:
        try:
            return int(await self._client.ttl(self.build_key(namespace, key)))
        except RedisError as exc:
            self._failed("get_ttl", namespace, key, exc)
            return TTL_MISSING

    # ------------------------------------------------------------------ #
    # Bulk operations                                                      #
    # ------------------------------------------------------------------ #

    async def evict_keys(self, namespace: str, keys: Iterable[str]) -> bool:
        full = [self.build_key(namespace, key) for key in keys]
        if not full:
            return True
        try:
            await self._client.delete(*full)
        except RedisError as exc:
            self._failed("evict_keys", namespace, None, exc)
            return False
        logger.debug("Evicted %d keys from %s", len(full), namespace)
        return True

    async def evict_all(self, *namespaces: str) -> bool:
        ok = True
        for namespace in namespaces:
            try:
                removed = await self._delete_matching(self._namespace_prefix(namespace) + "*")
            except RedisError as exc:
                self._failed("evict_all", namespace, None, exc)
                ok = False
                continue
            logger.info("Cleared namespace %s (%d entries)", namespace, removed)
        return ok

    async def keys(self, namespace: str, pattern: str = "*") -> set[str]:
        prefix = self._namespace_prefix(namespace)
        try:
            found = await self._scan(prefix + pattern)
        except RedisError as exc:
            self._failed("keys", namespace, pattern, exc)
            return set()
        return {key[len(prefix) :] for key in found}

    async def size(self, namespace: str) -> int:
        try:
            return len(await self._scan(self._namespace_prefix(namespace) + "*"))
        except RedisError as exc:
            self._failed("size", namespace, None, exc)
            return 0

    async def put_all(
        self, namespace: str, entries: Mapping[str, Any], ttl: int | None = None
    ) -> bool:
        if not entries:
            return True
        try:
            expiry = self._expiry(namespace, ttl)
            async with self._client.pipeline(transaction=False) as pipe:
                for key, value in entries.items():
                    pipe.set(self.build_key(namespace, key), _encode(value), ex=expiry)
                await pipe.execute()
        except (RedisError, ValueError) as exc:
            self._failed("put_all", namespace, None, exc)
            return False
        logger.info("Bulk cached %d entries in %s", len(entries), namespace)
        return True

    async def get_all(
        self, namespace: str, keys: Iterable[str], type_: Any = None
    ) -> dict[str, Any]:
        wanted = list(keys)
        if not wanted:
            return {}
        try:
            raws = await self._client.mget([self.build_key(namespace, k) for k in wanted])
        except RedisError as exc:
            self._failed("get_all", namespace, None, exc)
            return {}

        found: dict[str, Any] = {}
        for key, raw in zip(wanted, raws):
            if raw is None:
                continue
            try:
                found[key] = _decode(raw, type_)
            except ValueError as exc:
                self._failed("get_all", namespace, key, exc)
        self._hits[namespace] += len(found)
        self._misses[namespace] += len(wanted) - len(found)
        return found

    async def clear_all(self) -> bool:
        match = f"{self._settings.key_prefix}{self._settings.key_separator}*"
        try:
            removed = await self._delete_matching(match)
        except RedisError as exc:
            self._failed("clear_all", None, None, exc)
            return False
        logger.info("Cleared all cache entries (%d)", removed)
        return True

    async def stats(self, namespace: str) -> CacheStats:
        return CacheStats(
            size=await self.size(namespace),
            hit_count=self._hits[namespace],
            miss_count=self._misses[namespace],
        )

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            self._failed("ping", None, None, exc)
            return False

    async def close(self) -> None:
        await self._client.aclose()


class DisabledCacheService(CacheService):
    """Stand-in when caching is switched off: reads miss, writes succeed."""

    def __init__(self, settings: CacheSettings | None = None) -> None:
        self._settings = settings or CacheSettings(enabled=False)

    def build_key(self, namespace: str, key: str) -> str:
        sep = self._settings.key_separator
        return f"{self._settings.key_prefix}{sep}{namespace}{sep}{key}"

    async def put(self, namespace: str, key: str, value: Any, ttl: int | None = None) -> bool:
        return True

    async def get(self, namespace: str, key: str, type_: Any = None) -> Any | None:
        return None

    async def evict(self, namespace: str, key: str) -> bool:
        return True

    async def evict_keys(self, namespace: str, keys: Iterable[str]) -> bool:
        return True

    async def evict_all(self, *namespaces: str) -> bool:
        return True

    async def has_key(self, namespace: str, key: str) -> bool:
        return False

    async def keys(self, namespace: str, pattern: str = "*") -> set[str]:
        return set()

    async def size(self, namespace: str) -> int:
        return 0

    async def put_all(
        self, namespace: str, entries: Mapping[str, Any], ttl: int | None = None
    ) -> bool:
        return True

    async def get_all(
        self, namespace: str, keys: Iterable[str], type_: Any = None
    ) -> dict[str, Any]:
        return {}

    async def clear_all(self) -> bool:
        return True

    async def stats(self, namespace: str) -> CacheStats:
        return CacheStats(size=0, hit_count=0, miss_count=0)

    async def set_ttl(self, namespace: str, key: str, seconds: int) -> bool:
        return False

    async def get_ttl(self, namespace: str, key: str) -> int:
        return TTL_MISSING

    async def ping(self) -> bool:
        return True
