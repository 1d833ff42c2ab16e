"""Category service: cached CRUD and partial update for categories."""

from __future__ import annotations

from src.domain.models.catalog import Category, CategoryDTO
from src.domain.services.validation import FieldValidator
from src.infrastructure.cache.namespaces import CATEGORY_CACHES

from .cached import CachedEntityService
from .validators import is_absolute_path, is_non_blank, is_non_negative


class CategoryService(CachedEntityService[Category, CategoryDTO]):
    entity_type = "Category"
    record_type = Category
    dto_type = CategoryDTO
    namespaces = CATEGORY_CACHES

    def field_validator(self) -> FieldValidator:
        return (
            FieldValidator()
            .for_field("name", is_non_blank, "Category name must not be blank")
            .for_field("path", is_absolute_path, "Category path must start with '/'")
            .for_field("sort_order", is_non_negative, "Sort order must not be negative")
        )
