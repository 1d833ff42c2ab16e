"""Domain repository interfaces.

All abstractions are defined here with abc.ABC and @abstractmethod.
Concrete implementations live in src/infrastructure/persistence/ and are
wired at the application boundary via dependency injection.

Import from this package rather than individual modules to avoid coupling
handlers to specific repository module paths.
"""

from .articles import ArticleRepository
from .base import (
    NamedRecordRepository,
    Repository,
    StaleRecordError,
    VersionedRepository,
)
from .categories import CategoryRepository

__all__ = [
    "Repository",
    "VersionedRepository",
    "NamedRecordRepository",
    "StaleRecordError",
    "CategoryRepository",
    "ArticleRepository",
]
