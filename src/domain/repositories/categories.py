"""Category repository interface."""

from __future__ import annotations

from abc import abstractmethod

from src.domain.models.catalog import Category
from src.domain.models.enums import CategoryStatus

from .base import NamedRecordRepository


class CategoryRepository(NamedRecordRepository[Category]):
    """Read/write interface for Category records.

    name and path are unique; create() raises if either already exists.
    list() returns categories ordered by sort_order, then name.
    """

    entity_type = "Category"

    @abstractmethod
    async def list(
        self,
        status: CategoryStatus | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> list[Category]:
        """Return a page of categories, optionally filtered by status."""
