"""Tests for src/domain/models/__init__.py and src/domain/services/__init__.py: package exports."""

from src.domain.models import __all__ as domain_all
from src.domain.models import ArticleDTO, CategoryStatus, PartialUpdate
from src.domain.services import __all__ as services_all
from src.domain.services import CrudService, FieldPolicy, coerce


def test_domain_models_exports_9_names():
    assert len(domain_all) == 9


def test_category_status_importable_from_package():
    assert CategoryStatus.ACTIVE == "ACTIVE"


def test_article_dto_importable_from_package():
    assert ArticleDTO.__name__ == "ArticleDTO"


def test_partial_update_importable_from_package():
    assert PartialUpdate().fields == {}


def test_domain_services_exports_engine_and_helpers():
    assert {"CrudService", "FieldPolicy", "FieldValidator", "coerce"} <= set(services_all)


def test_domain_services_objects_importable():
    assert CrudService.__name__ == "CrudService"
    assert FieldPolicy.__name__ == "FieldPolicy"
    assert callable(coerce)
