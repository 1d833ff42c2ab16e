"""Application services: cache-coherent entity services."""

from .articles import ArticleService
from .cached import CachedEntityService
from .categories import CategoryService

__all__ = ["ArticleService", "CachedEntityService", "CategoryService"]
