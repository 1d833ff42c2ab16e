"""Catalog ORM models: categories, articles.

Both tables carry the optimistic-concurrency version column (mapped as
SQLAlchemy's version_id_col, so every flush of a changed row issues
UPDATE ... WHERE id = :id AND version = :expected) and the audit columns.
Audit timestamps are generated Python-side so they are populated on the
instance after a flush without an extra round trip.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditColumns:
    """Identity, soft-active flag and audit columns shared by versioned tables."""

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    last_modified_by: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_modified_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class Category(AuditColumns, Base):
    """Top-level grouping for articles.

    name and path are natural keys, unique across the table.
    status: 'ACTIVE' | 'HIDDEN' | 'ARCHIVED'
    """

    __tablename__ = "categories"
    __table_args__ = (
        UniqueConstraint("name", name="uq_categories_name"),
        UniqueConstraint("path", name="uq_categories_path"),
        CheckConstraint(
            "status IN ('ACTIVE', 'HIDDEN', 'ARCHIVED')", name="ck_categories_status"
        ),
        Index("ix_categories_created_at", "created_at"),
        Index("ix_categories_created_by", "created_by"),
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    status: Mapped[str] = mapped_column(Text, nullable=False, default="ACTIVE")
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    articles: Mapped[list["Article"]] = relationship(back_populates="category")

    __mapper_args__ = {"version_id_col": version}


class Article(AuditColumns, Base):
    """Published or draft content belonging to exactly one category.

    status: 'DRAFT' | 'ACTIVE' | 'ARCHIVED'
    rating is 0.00 to 5.00 when present; enforced at the application layer.
    """

    __tablename__ = "articles"
    __table_args__ = (
        UniqueConstraint("name", name="uq_articles_name"),
        UniqueConstraint("path", name="uq_articles_path"),
        CheckConstraint(
            "status IN ('DRAFT', 'ACTIVE', 'ARCHIVED')", name="ck_articles_status"
        ),
        Index("ix_articles_category_id", "category_id"),
        Index("ix_articles_created_at", "created_at"),
        Index("ix_articles_created_by", "created_by"),
    )

    version: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    path: Mapped[str] = mapped_column(Text, nullable=False)
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("categories.id"), nullable=False
    )
    status: Mapped[str] = mapped_column(Text, nullable=False, default="DRAFT")
    reading_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    rating: Mapped[Optional[Decimal]] = mapped_column(Numeric(3, 2), nullable=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    published_on: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    published_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    expires_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    category: Mapped["Category"] = relationship(back_populates="articles")

    __mapper_args__ = {"version_id_col": version}
