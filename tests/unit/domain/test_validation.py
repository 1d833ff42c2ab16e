"""Tests for src/domain/services/validation.py."""

from src.domain.services.validation import FieldValidator


def _validator() -> FieldValidator:
    return (
        FieldValidator()
        .for_field("name", lambda v: bool(str(v).strip()), "must not be blank")
        .for_field("path", lambda v: str(v).startswith("/"), "must start with '/'")
    )


def test_unregistered_field_always_passes():
    assert FieldValidator().validate_field("anything", None) is True


def test_registered_field_runs_predicate():
    validator = _validator()
    assert validator.validate_field("name", "Guides") is True
    assert validator.validate_field("name", "  ") is False


def test_error_message_lookup():
    validator = _validator()
    assert validator.error_message("path") == "must start with '/'"
    assert validator.error_message("other") is None


def test_validate_fields_collects_every_failure():
    errors = _validator().validate_fields({"name": "", "path": "guides", "sort_order": -1})
    assert errors == {"name": "must not be blank", "path": "must start with '/'"}


def test_validate_fields_empty_when_all_pass():
    assert _validator().validate_fields({"name": "Guides", "path": "/guides"}) == {}


def test_for_field_replaces_earlier_registration():
    validator = FieldValidator().for_field("name", lambda v: False, "first")
    validator.for_field("name", lambda v: True, "second")
    assert validator.validate_field("name", "x") is True
    assert validator.error_message("name") == "second"
