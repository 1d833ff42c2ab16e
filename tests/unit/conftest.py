"""Shared fixtures: in-memory Redis and record-store fakes.

FakeRedis implements the slice of redis.asyncio.Redis the cache layer uses
(decode_responses=True semantics).  InMemoryRepository is a versioned record
store that can simulate writers racing the caller.
"""

from __future__ import annotations

from datetime import datetime, timezone
from fnmatch import fnmatchcase
from uuid import UUID, uuid4

import pytest

from src.domain.errors import RecordNotFound
from src.domain.models.catalog import Article, Category
from src.domain.repositories.base import NamedRecordRepository, StaleRecordError
from src.infrastructure.cache.service import RedisCacheService
from src.infrastructure.settings import CacheSettings


class FakePipeline:
    def __init__(self, redis: FakeRedis) -> None:
        self._redis = redis
        self._queued: list[tuple[str, str | bytes, int | None]] = []

    async def __aenter__(self) -> FakePipeline:
        return self

    async def __aexit__(self, *exc_info) -> None:
        self._queued.clear()

    def set(self, key: str, value: str | bytes, ex: int | None = None) -> FakePipeline:
        self._queued.append((key, value, ex))
        return self

    async def execute(self) -> list[bool]:
        results = [await self._redis.set(k, v, ex=ex) for k, v, ex in self._queued]
        self._queued.clear()
        return results


class FakeRedis:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    async def get(self, key: str) -> str | None:
        return self.store.get(key)

    async def set(self, key: str, value: str | bytes, ex: int | None = None) -> bool:
        self.store[key] = value.decode() if isinstance(value, bytes) else value
        if ex is None:
            self.ttls.pop(key, None)
        else:
            self.ttls[key] = ex
        return True

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        return sum(1 for key in keys if key in self.store)

    async def expire(self, key: str, seconds: int) -> bool:
        if key not in self.store:
            return False
        self.ttls[key] = seconds
        return True

    async def ttl(self, key: str) -> int:
        if key not in self.store:
            return -2
        return self.ttls.get(key, -1)

    async def mget(self, keys: list[str]) -> list[str | None]:
        return [self.store.get(key) for key in keys]

    async def scan_iter(self, match: str | None = None, count: int | None = None):
        for key in list(self.store):
            if match is None or fnmatchcase(key, match):
                yield key

    def pipeline(self, transaction: bool = True) -> FakePipeline:
        return FakePipeline(self)

    async def ping(self) -> bool:
        return True

    async def aclose(self) -> None:
        pass


class InMemoryRepository(NamedRecordRepository):
    """Versioned store keeping records in a dict.

    concurrent_writes simulates that many competing writers: each update()
    call first lets one of them commit (bumping the stored version), so the
    caller's write then fails the version check.
    """

    def __init__(self, entity_type: str = "Record", actor: str = "system") -> None:
        self.entity_type = entity_type
        self.actor = actor
        self.records: dict[UUID, object] = {}
        self.concurrent_writes = 0
        self.get_calls = 0
        self.update_calls = 0

    def seed(self, record):
        now = datetime.now(timezone.utc)
        stored = record.model_copy(
            update={
                "id": record.id or uuid4(),
                "version": record.version or 1,
                "created_by": record.created_by or self.actor,
                "created_at": record.created_at or now,
                "last_modified_at": record.last_modified_at or now,
            }
        )
        self.records[stored.id] = stored
        return stored

    def bump(self, record_id: UUID) -> None:
        current = self.records[record_id]
        self.records[record_id] = current.model_copy(update={"version": current.version + 1})

    async def get_by_id(self, record_id):
        self.get_calls += 1
        return self.records.get(record_id)

    async def get_by_name(self, name):
        return next((r for r in self.records.values() if r.name == name), None)

    async def get_by_path(self, path):
        return next((r for r in self.records.values() if r.path == path), None)

    async def list(self, limit=50, offset=0):
        return list(self.records.values())[offset : offset + limit]

    async def list_all(self):
        return list(self.records.values())

    async def find_by_created_by(self, created_by):
        return [r for r in self.records.values() if r.created_by == created_by]

    async def find_by_created_between(self, start, end):
        return [r for r in self.records.values() if start <= r.created_at <= end]

    async def list_by_category(self, category_id):
        return [r for r in self.records.values() if r.category_id == category_id]

    async def create(self, entity):
        return self.seed(entity.model_copy(update={"id": None, "version": None}))

    async def update(self, entity):
        self.update_calls += 1
        stored = self.records.get(entity.id)
        if stored is None:
            raise RecordNotFound(self.entity_type, entity.id)
        if self.concurrent_writes > 0:
            self.concurrent_writes -= 1
            self.bump(entity.id)
            stored = self.records[entity.id]
        if entity.version is not None and entity.version != stored.version:
            raise StaleRecordError(entity.id, stored.version)
        saved = entity.model_copy(
            update={
                "version": stored.version + 1,
                "created_by": stored.created_by,
                "created_at": stored.created_at,
                "last_modified_by": self.actor,
                "last_modified_at": datetime.now(timezone.utc),
            }
        )
        self.records[entity.id] = saved
        return saved

    async def delete(self, id):
        self.records.pop(id, None)


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def cache_settings() -> CacheSettings:
    return CacheSettings(_env_file=None)


@pytest.fixture
def cache(fake_redis, cache_settings) -> RedisCacheService:
    return RedisCacheService(fake_redis, cache_settings)


@pytest.fixture
def category_repo() -> InMemoryRepository:
    return InMemoryRepository("Category")


@pytest.fixture
def article_repo() -> InMemoryRepository:
    return InMemoryRepository("Article")


@pytest.fixture
def guides(category_repo) -> Category:
    return category_repo.seed(Category(name="Guides", path="/guides", sort_order=1))


@pytest.fixture
def article(article_repo, guides) -> Article:
    return article_repo.seed(
        Article(
            name="Getting started",
            path="/guides/getting-started",
            summary="First steps",
            content="...",
            category_id=guides.id,
        )
    )
