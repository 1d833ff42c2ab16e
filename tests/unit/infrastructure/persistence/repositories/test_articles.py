"""Tests for SqlArticleRepository: mapping and session interaction."""

from datetime import date, datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from src.domain.models.catalog import Article
from src.domain.models.enums import ArticleStatus
from src.infrastructure.persistence.repositories.articles import SqlArticleRepository


def _orm_article(**overrides):
    now = datetime.now(timezone.utc)
    defaults = {
        "id": uuid4(),
        "version": 1,
        "is_active": True,
        "created_by": "system",
        "created_at": now,
        "last_modified_by": "system",
        "last_modified_at": now,
        "name": "Intro",
        "path": "/guides/intro",
        "summary": "First steps",
        "content": "...",
        "category_id": uuid4(),
        "status": "DRAFT",
        "reading_minutes": 5,
        "rating": Decimal("4.50"),
        "featured": False,
        "published_on": date(2024, 3, 5),
        "published_at": datetime(2024, 3, 5, 9, 0),
        "expires_at": None,
    }
    defaults.update(overrides)
    return SimpleNamespace(**defaults)


def _mock_session(rows=(), scalar=None):
    session = AsyncMock()
    session.execute.return_value = MagicMock(
        scalar_one_or_none=MagicMock(return_value=scalar),
        scalars=MagicMock(return_value=list(rows)),
    )
    return session


# --- _to_domain mapping ---

def test_to_domain_maps_status_enum():
    result = SqlArticleRepository._to_domain(_orm_article(status="ARCHIVED"))
    assert result.status is ArticleStatus.ARCHIVED


def test_to_domain_maps_rating_decimal():
    assert SqlArticleRepository._to_domain(_orm_article()).rating == Decimal("4.50")


def test_to_domain_maps_temporal_columns():
    result = SqlArticleRepository._to_domain(_orm_article())
    assert result.published_on == date(2024, 3, 5)
    assert result.published_at == datetime(2024, 3, 5, 9, 0)
    assert result.expires_at is None


def test_write_columns_stores_status_value():
    row = _orm_article()
    entity = Article(
        name="Intro",
        path="/guides/intro",
        summary="",
        content="",
        category_id=row.category_id,
        status=ArticleStatus.ACTIVE,
        featured=True,
    )
    SqlArticleRepository(AsyncMock())._write_columns(row, entity)
    assert row.status == "ACTIVE"
    assert row.featured is True


# --- session interaction ---

async def test_get_by_name_returns_none_when_not_found():
    repo = SqlArticleRepository(_mock_session())
    assert await repo.get_by_name("missing") is None


async def test_list_by_category_maps_rows():
    cid = uuid4()
    repo = SqlArticleRepository(_mock_session(rows=[_orm_article(category_id=cid)]))
    result = await repo.list_by_category(cid)
    assert [a.category_id for a in result] == [cid]


async def test_list_returns_articles():
    repo = SqlArticleRepository(_mock_session(rows=[_orm_article(), _orm_article(name="B")]))
    assert len(await repo.list(status=ArticleStatus.DRAFT, limit=10)) == 2


async def test_find_by_created_by_returns_empty_list():
    repo = SqlArticleRepository(_mock_session())
    assert await repo.find_by_created_by("nobody") == []
