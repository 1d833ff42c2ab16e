"""Add indexes for article-by-category and audit lookups.

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op

revision: str = "0002"
down_revision: Union[str, None] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_index("ix_articles_category_id", "articles", ["category_id"])
    op.create_index("ix_articles_created_at", "articles", ["created_at"])
    op.create_index("ix_articles_created_by", "articles", ["created_by"])
    op.create_index("ix_categories_created_at", "categories", ["created_at"])
    op.create_index("ix_categories_created_by", "categories", ["created_by"])


def downgrade() -> None:
    op.drop_index("ix_categories_created_by", table_name="categories")
    op.drop_index("ix_categories_created_at", table_name="categories")
    op.drop_index("ix_articles_created_by", table_name="articles")
    op.drop_index("ix_articles_created_at", table_name="articles")
    op.drop_index("ix_articles_category_id", table_name="articles")
