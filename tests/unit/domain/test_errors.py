"""Tests for src/domain/errors.py."""

from uuid import uuid4

from src.domain.errors import (
    CacheOperationFailure,
    CatalogError,
    ConversionFailure,
    FieldValidationFailure,
    OptimisticConflict,
    RecordNotFound,
    RetryExhausted,
)


def test_all_errors_share_the_catalog_root():
    for cls in (
        RecordNotFound,
        OptimisticConflict,
        RetryExhausted,
        FieldValidationFailure,
        ConversionFailure,
        CacheOperationFailure,
    ):
        assert issubclass(cls, CatalogError)


# --- RecordNotFound ---

def test_record_not_found_message_and_code():
    rid = uuid4()
    err = RecordNotFound("Category", rid)
    assert err.error_code == "RESOURCE_NOT_FOUND"
    assert str(err) == f"Category not found with id: {rid}"


def test_record_not_found_by_natural_key():
    err = RecordNotFound("Article", "/a", key_name="path")
    assert err.message == "Article not found with path: /a"


# --- OptimisticConflict / RetryExhausted ---

def test_optimistic_conflict_fields():
    rid = uuid4()
    err = OptimisticConflict(rid, 4, 3, "Category")
    assert err.error_code == "OPTIMISTIC_LOCK_ERROR"
    assert (err.entity_id, err.current_version, err.attempted_version) == (rid, 4, 3)
    assert err.message == "Entity has been modified by another user"


def test_optimistic_conflict_allows_unknown_current_version():
    assert OptimisticConflict(uuid4(), None, 3, "Article").current_version is None


def test_retry_exhausted_preserves_conflict_context():
    rid = uuid4()
    err = RetryExhausted(OptimisticConflict(rid, 7, 6, "Article"), attempts=3)
    assert isinstance(err, OptimisticConflict)
    assert err.error_code == "OPTIMISTIC_LOCK_RETRY_EXHAUSTED"
    assert (err.entity_id, err.current_version, err.attempted_version) == (rid, 7, 6)
    assert err.entity_type == "Article"
    assert err.attempts == 3
    assert "after 3 attempts" in err.message


# --- FieldValidationFailure ---

def test_field_validation_failure_from_field_errors():
    err = FieldValidationFailure.from_field_errors(
        {"name": "must not be blank", "path": "must start with '/'"}
    )
    assert err.errors == ["name: must not be blank", "path: must start with '/'"]
    assert err.message.startswith("Field validation failed:")
    assert "\n- name: must not be blank" in err.message


# --- ConversionFailure ---

def test_conversion_failure_names_field_and_target():
    err = ConversionFailure("abc", "int", field="sort_order")
    assert err.error_code == "CONVERSION_FAILED"
    assert err.message == "Cannot convert 'abc' to int for field 'sort_order'"


# --- CacheOperationFailure ---

def test_cache_operation_failure_carries_context():
    cause = ConnectionError("down")
    err = CacheOperationFailure("get", "category", "dto_1", cause)
    assert err.cause is cause
    assert "category/dto_1" in err.message


# --- ErrorResponse ---

def test_error_response_wire_shape_is_camel_case():
    wire = FieldValidationFailure("bad", ["a: b"]).to_response().to_wire()
    assert wire["errorCode"] == "BUSINESS_VALIDATION_FAILED"
    assert wire["message"] == "bad"
    assert wire["errors"] == ["a: b"]
    assert "timestamp" in wire


def test_error_response_omits_missing_errors():
    wire = RecordNotFound("Category", 1).to_response().to_wire()
    assert "errors" not in wire
