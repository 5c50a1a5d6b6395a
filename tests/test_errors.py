"""Tests for the error taxonomy and store error classification."""

from http import HTTPStatus

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from apipls.errors import (
    ConstraintViolationError,
    GenericStoreError,
    NoValidFieldsError,
    ResourceNotFoundError,
    map_store_error,
)
from apipls.store import StoreError, StoreErrorKind, classify_error


class _DriverError(Exception):
    def __init__(self, message: str, sqlstate: str | None = None) -> None:
        super().__init__(message)
        self.sqlstate = sqlstate


def test_error_objects() -> None:
    assert ResourceNotFoundError().to_error() == {
        "status": "404",
        "title": "Resource Not Found",
        "detail": "The requested resource does not exist.",
    }
    error = NoValidFieldsError("people")
    assert error.status_code == HTTPStatus.UNPROCESSABLE_ENTITY
    assert "people" in error.to_error()["detail"]


@pytest.mark.parametrize(
    ("kind", "status", "cls"),
    [
        (StoreErrorKind.NO_DATA, 404, ResourceNotFoundError),
        (StoreErrorKind.UNIQUE_VIOLATION, 409, ConstraintViolationError),
        (StoreErrorKind.FOREIGN_KEY_VIOLATION, 422, ConstraintViolationError),
        (StoreErrorKind.NOT_NULL_VIOLATION, 422, ConstraintViolationError),
        (StoreErrorKind.CHECK_VIOLATION, 422, ConstraintViolationError),
        (StoreErrorKind.MULTIPLE_ROWS, 500, GenericStoreError),
        (StoreErrorKind.UNKNOWN, 500, GenericStoreError),
    ],
)
def test_store_errors_map_to_client_errors(kind: StoreErrorKind, status: int, cls: type) -> None:
    error = map_store_error(StoreError(kind, 'relation "person" does not exist'), "people")

    assert isinstance(error, cls)
    assert error.status_code == status


def test_generic_errors_hide_store_details() -> None:
    error = map_store_error(
        StoreError(StoreErrorKind.UNKNOWN, 'column "secret_column" of relation "person"'), "people"
    )
    body = error.to_error()

    assert "secret_column" not in body["detail"]
    assert "person" not in body["detail"]
    assert body["title"] == "Server Error"


@pytest.mark.parametrize(
    ("orig", "kind"),
    [
        (_DriverError("duplicate key", "23505"), StoreErrorKind.UNIQUE_VIOLATION),
        (_DriverError("fk", "23503"), StoreErrorKind.FOREIGN_KEY_VIOLATION),
        (_DriverError("null", "23502"), StoreErrorKind.NOT_NULL_VIOLATION),
        (_DriverError("check", "23514"), StoreErrorKind.CHECK_VIOLATION),
        (_DriverError("UNIQUE constraint failed: person.email"), StoreErrorKind.UNIQUE_VIOLATION),
        (_DriverError("NOT NULL constraint failed: cat.name"), StoreErrorKind.NOT_NULL_VIOLATION),
        (_DriverError("something else"), StoreErrorKind.UNKNOWN),
    ],
)
def test_integrity_errors_are_classified(orig: Exception, kind: StoreErrorKind) -> None:
    assert classify_error(IntegrityError("INSERT ...", {}, orig)) is kind


def test_non_integrity_errors_are_unknown() -> None:
    exc = OperationalError("SELECT 1", {}, _DriverError("connection refused"))
    assert classify_error(exc) is StoreErrorKind.UNKNOWN
