"""Concrete SQLAlchemy repository implementations.

Exports all SqlRepository classes and the get_repositories() factory function
for wiring at the application boundary.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from .articles import SqlArticleRepository
from .categories import SqlCategoryRepository
from .versioned import SqlVersionedRepository


@dataclass
class Repositories:
    """All repository instances bound to a single AsyncSession."""

    categories: SqlCategoryRepository
    articles: SqlArticleRepository


def get_repositories(session: AsyncSession, actor: str = "system") -> Repositories:
    """Construct all repositories bound to the given session.

    actor is written to the created_by / last_modified_by audit columns:

        async with AsyncSessionLocal() as session:
            repos = get_repositories(session, actor="editor@example.com")
            category = await repos.categories.get_by_path("/guides")
    """
    return Repositories(
        categories=SqlCategoryRepository(session, actor),
        articles=SqlArticleRepository(session, actor),
    )


__all__ = [
    "SqlArticleRepository",
    "SqlCategoryRepository",
    "SqlVersionedRepository",
    "Repositories",
    "get_repositories",
]
