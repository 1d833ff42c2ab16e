"""Tests for src/infrastructure/cache/warmup.py."""

import asyncio
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from src.domain.models.catalog import CategoryDTO
from src.infrastructure.cache.namespaces import ARTICLE_CACHES, CATEGORY_CACHES
from src.infrastructure.cache.service import DisabledCacheService
from src.infrastructure.cache.warmup import CacheWarmupService, WarmupTarget
from src.infrastructure.settings import CacheSettings, EntityCacheSettings


def _dtos():
    return [
        CategoryDTO(id=uuid4(), version=1, name="Guides", path="/guides"),
        CategoryDTO(id=uuid4(), version=1, name="News", path="/news"),
    ]


def _settings(**warmup):
    return CacheSettings(
        _env_file=None,
        entities={
            "category": EntityCacheSettings(warmup_on_startup=warmup.get("category", False)),
            "article": EntityCacheSettings(warmup_on_startup=warmup.get("article", False)),
        },
    )


def _service(cache, settings, category_loader=None, article_loader=None):
    return CacheWarmupService(
        cache,
        settings,
        [
            WarmupTarget(CATEGORY_CACHES, category_loader or AsyncMock(return_value=_dtos())),
            WarmupTarget(ARTICLE_CACHES, article_loader or AsyncMock(return_value=[])),
        ],
    )


# --- warm_up ---

async def test_warm_up_populates_every_namespace(cache, cache_settings):
    dtos = _dtos()
    svc = _service(cache, cache_settings, AsyncMock(return_value=dtos))
    assert await svc.warm_up("category") == 2
    first = dtos[0]
    assert await cache.get("category", f"dto_{first.id}", CategoryDTO) == first
    assert await cache.get("category_by_name", "dto_Guides", CategoryDTO) == first
    assert await cache.get("category_by_path", "dto_/news", CategoryDTO) == dtos[1]
    assert await cache.get("all_categories", "dto_all", list[CategoryDTO]) == dtos


async def test_warm_up_clears_stale_entries_first(cache, cache_settings):
    await cache.put("category_by_name", "dto_Removed", 1)
    await _service(cache, cache_settings).warm_up("category")
    assert await cache.has_key("category_by_name", "dto_Removed") is False


async def test_warm_up_unknown_type_returns_zero(cache, cache_settings):
    assert await _service(cache, cache_settings).warm_up("tag") == 0


async def test_warm_up_loader_failure_returns_zero(cache, cache_settings):
    loader = AsyncMock(side_effect=RuntimeError("database unavailable"))
    assert await _service(cache, cache_settings, loader).warm_up("category") == 0
    assert await cache.size("all_categories") == 0


async def test_warm_up_empty_result_caches_empty_list(cache, cache_settings):
    await _service(cache, cache_settings).warm_up("article")
    assert await cache.get("all_articles", "dto_all") == []


# --- startup warmup ---

async def test_startup_warms_only_enabled_types(cache):
    category_loader = AsyncMock(return_value=_dtos())
    article_loader = AsyncMock(return_value=[])
    svc = _service(cache, _settings(category=True), category_loader, article_loader)
    assert await svc.warm_up_on_startup() == {"category": 2}
    article_loader.assert_not_awaited()


async def test_startup_runs_once(cache):
    loader = AsyncMock(return_value=_dtos())
    svc = _service(cache, _settings(category=True), loader)
    await svc.warm_up_on_startup()
    assert await svc.warm_up_on_startup() == {}
    assert loader.await_count == 1
    assert svc.started is True


async def test_concurrent_startup_calls_warm_once(cache):
    loader = AsyncMock(return_value=_dtos())
    svc = _service(cache, _settings(category=True), loader)
    await asyncio.gather(svc.warm_up_on_startup(), svc.warm_up_on_startup())
    assert loader.await_count == 1


async def test_startup_skipped_when_caching_disabled():
    loader = AsyncMock(return_value=_dtos())
    settings = _settings(category=True).model_copy(update={"enabled": False})
    svc = _service(DisabledCacheService(settings), settings, loader)
    assert await svc.warm_up_on_startup() == {}
    loader.assert_not_awaited()


# --- manual warmup ---

async def test_manual_all_ignores_startup_flags(cache):
    article_loader = AsyncMock(return_value=[])
    svc = _service(cache, _settings(), article_loader=article_loader)
    assert await svc.warm_up_entity_cache("ALL") == {"category": 2, "article": 0}
    article_loader.assert_awaited_once()


async def test_manual_single_type(cache, cache_settings):
    assert await _service(cache, cache_settings).warm_up_entity_cache("Category") == {"category": 2}


# --- status ---

async def test_warmup_status(cache):
    svc = _service(cache, _settings(article=True))
    await svc.warm_up("category")
    status = await svc.warmup_status()
    assert status["category_cache_size"] == 2
    assert status["category_warmup_enabled"] is False
    assert status["article_warmup_enabled"] is True
    assert status["startup_warmup_ran"] is False
    assert status["status"] == "healthy"


async def test_warmup_status_unavailable_when_ping_fails(cache_settings):
    cache = AsyncMock()
    cache.size.return_value = 0
    cache.ping.return_value = False
    status = await _service(cache, cache_settings).warmup_status()
    assert status["status"] == "unavailable"
