# mypy: ignore-errors
# tests/v1/test_errors.py
"""Tests for error kinds and their status codes."""

import pytest

from postline.core.errors import (
    STATUS_CODES,
    Conflict,
    ErrorKind,
    NotAuthenticated,
    NotAuthorized,
    NotFound,
    StorageUnavailable,
    ValidationFailed,
    error_for_kind,
    status_for,
)
from postline.services.validation import Violation


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ValidationFailed(), 422),
        (NotAuthenticated(), 401),
        (NotAuthorized(), 403),
        (NotFound(), 404),
        (Conflict(), 409),
        (StorageUnavailable(), 500),
        (ValueError("boom"), 500),
    ],
)
def test_status_for(error, code) -> None:
    assert status_for(error) == code


def test_every_kind_has_a_status() -> None:
    assert set(STATUS_CODES) == set(ErrorKind)


def test_error_for_kind_round_trips_every_kind() -> None:
    for kind in ErrorKind:
        error = error_for_kind(kind, "custom")
        assert error.kind is kind
        assert error.message == "custom"


def test_validation_payload_lists_violations() -> None:
    error = ValidationFailed([Violation("title", "Invalid title.")])
    assert error.status_code == 422
    assert error.to_payload() == {
        "message": "Validation failed, entered data is incorrect.",
        "kind": "ValidationFailed",
        "data": [{"field": "title", "message": "Invalid title."}],
    }


def test_default_messages() -> None:
    assert NotFound().to_payload() == {"message": "Resource not found.", "kind": "NotFound", "data": None}
