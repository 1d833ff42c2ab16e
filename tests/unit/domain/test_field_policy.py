"""Tests for src/domain/services/field_policy.py."""

from datetime import date
from decimal import Decimal
from typing import ClassVar
from uuid import uuid4

import pytest

from src.domain.errors import ConversionFailure, FieldValidationFailure
from src.domain.models.base import TransferObject
from src.domain.models.catalog import ArticleDTO, CategoryDTO
from src.domain.models.enums import ArticleStatus, CategoryStatus
from src.domain.services.coercion import TargetType
from src.domain.services.field_policy import FieldPolicy


def _category() -> CategoryDTO:
    return CategoryDTO(id=uuid4(), version=2, name="Guides", path="/guides")


def _article() -> ArticleDTO:
    return ArticleDTO(
        id=uuid4(),
        version=1,
        name="Intro",
        path="/guides/intro",
        summary="",
        content="",
        category_id=uuid4(),
    )


# --- construction ---

def test_policy_is_cached_per_model():
    assert FieldPolicy.for_model(CategoryDTO) is FieldPolicy.for_model(CategoryDTO)


def test_policy_updatable_matches_allow_list():
    assert FieldPolicy.for_model(ArticleDTO).updatable == ArticleDTO.updatable_fields


def test_policy_rejects_allow_list_naming_unknown_field():
    class _Broken(TransferObject):
        updatable_fields: ClassVar[frozenset[str]] = frozenset({"missing"})

    with pytest.raises(TypeError):
        FieldPolicy.for_model(_Broken)


def test_resolve_returns_coercion_target():
    spec = FieldPolicy.for_model(ArticleDTO).resolve("rating")
    assert spec.target.kind is TargetType.DECIMAL


# --- resolve rejections ---

def test_resolve_unknown_field_raises():
    with pytest.raises(FieldValidationFailure) as exc:
        FieldPolicy.for_model(CategoryDTO).resolve("colour")
    assert exc.value.message == "Unknown field: colour"


@pytest.mark.parametrize("name", ["id", "version", "created_by", "last_modified_at"])
def test_resolve_base_field_is_not_updatable(name):
    with pytest.raises(FieldValidationFailure) as exc:
        FieldPolicy.for_model(CategoryDTO).resolve(name)
    assert "does not support partial update" in exc.value.message


def test_resolve_article_category_id_is_not_updatable():
    with pytest.raises(FieldValidationFailure):
        FieldPolicy.for_model(ArticleDTO).resolve("category_id")


# --- apply ---

def test_apply_returns_new_object_with_coerced_values():
    original = _category()
    merged = FieldPolicy.for_model(CategoryDTO).apply(
        original, {"sort_order": "5", "status": "HIDDEN"}
    )
    assert merged.sort_order == 5
    assert merged.status is CategoryStatus.HIDDEN
    assert original.sort_order == 0
    assert merged.id == original.id
    assert merged.version == original.version


def test_apply_handles_every_article_target():
    merged = FieldPolicy.for_model(ArticleDTO).apply(
        _article(),
        {
            "rating": 4.5,
            "featured": "yes",
            "reading_minutes": "12",
            "status": "ACTIVE",
            "published_on": "25/12/2024",
            "expires_at": "2030-01-01T00:00:00Z",
        },
    )
    assert merged.rating == Decimal("4.5")
    assert merged.featured is True
    assert merged.reading_minutes == 12
    assert merged.status is ArticleStatus.ACTIVE
    assert merged.published_on == date(2024, 12, 25)
    assert merged.expires_at.tzinfo is not None


def test_apply_explicit_null_clears_optional_field():
    target = _article().model_copy(update={"rating": Decimal("3")})
    merged = FieldPolicy.for_model(ArticleDTO).apply(target, {"rating": None})
    assert merged.rating is None


def test_apply_null_for_required_field_raises_validation_failure():
    with pytest.raises(FieldValidationFailure) as exc:
        FieldPolicy.for_model(CategoryDTO).apply(_category(), {"name": None})
    assert exc.value.errors[0].startswith("name:")


def test_apply_rejects_whole_request_when_one_field_is_unknown():
    with pytest.raises(FieldValidationFailure):
        FieldPolicy.for_model(CategoryDTO).apply(_category(), {"name": "New", "colour": "red"})


def test_apply_conversion_failure_names_the_field():
    with pytest.raises(ConversionFailure) as exc:
        FieldPolicy.for_model(CategoryDTO).apply(_category(), {"sort_order": "many"})
    assert exc.value.field == "sort_order"


def test_apply_lenient_booleans():
    merged = FieldPolicy.for_model(ArticleDTO).apply(
        _article(), {"featured": "perhaps"}, strict_booleans=False
    )
    assert merged.featured is False


def test_apply_empty_fields_is_identity():
    original = _category()
    assert FieldPolicy.for_model(CategoryDTO).apply(original, {}) == original
