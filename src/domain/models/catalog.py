"""Category and article domain models.

Each record type comes as a pair: the record (store representation) and its
transfer object (wire representation).  Both carry a natural name and a
natural path, which are unique per record type and double as cache keys.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar
from uuid import UUID

from pydantic import AwareDatetime

from .base import TransferObject, VersionedRecord
from .enums import ArticleStatus, CategoryStatus


class Category(VersionedRecord):
    """A named grouping of articles.

    path is the URL-style natural key (e.g. "/guides"); name is the display
    natural key.  Both are unique across categories.
    """

    name: str
    path: str
    status: CategoryStatus = CategoryStatus.ACTIVE
    sort_order: int = 0


class CategoryDTO(TransferObject):
    updatable_fields: ClassVar[frozenset[str]] = frozenset(
        {"name", "path", "status", "sort_order"}
    )

    name: str
    path: str
    status: CategoryStatus = CategoryStatus.ACTIVE
    sort_order: int = 0


class Article(VersionedRecord):
    """A piece of content filed under exactly one category.

    published_on is a calendar date, published_at a local date-time as
    entered by editors, expires_at an absolute instant (timezone-aware).
    rating is a 0–5 editorial score kept as a Decimal to avoid float drift.
    """

    name: str
    path: str
    summary: str
    content: str
    category_id: UUID
    status: ArticleStatus = ArticleStatus.DRAFT
    reading_minutes: int = 0
    rating: Decimal | None = None
    featured: bool = False
    published_on: date | None = None
    published_at: datetime | None = None
    expires_at: AwareDatetime | None = None


class ArticleDTO(TransferObject):
    """Wire representation of an Article.

    category_id is fixed at creation; moving an article between categories
    goes through a full update.
    """

    updatable_fields: ClassVar[frozenset[str]] = frozenset(
        {
            "name",
            "path",
            "summary",
            "content",
            "status",
            "reading_minutes",
            "rating",
            "featured",
            "published_on",
            "published_at",
            "expires_at",
        }
    )

    name: str
    path: str
    summary: str
    content: str
    category_id: UUID
    status: ArticleStatus = ArticleStatus.DRAFT
    reading_minutes: int = 0
    rating: Decimal | None = None
    featured: bool = False
    published_on: date | None = None
    published_at: datetime | None = None
    expires_at: AwareDatetime | None = None
