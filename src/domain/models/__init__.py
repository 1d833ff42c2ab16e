"""Domain model package.

All domain objects are pure Python / Pydantic models with no ORM or
infrastructure dependencies.  Import from this package to avoid coupling
application code to individual module paths.
"""

from .base import TransferObject, VersionedRecord
from .catalog import Article, ArticleDTO, Category, CategoryDTO
from .enums import ArticleStatus, CategoryStatus
from .updates import PartialUpdate

__all__ = [
    # enums
    "ArticleStatus",
    "CategoryStatus",
    # base
    "TransferObject",
    "VersionedRecord",
    # catalog
    "Article",
    "ArticleDTO",
    "Category",
    "CategoryDTO",
    # requests
    "PartialUpdate",
]
