"""Unit tests for error translation.

Covers:
- translate: one status per error kind, envelope shape, generic message
  for unexpected failures.
- to_domain_error: repository and database errors.
- api_exception_handler: DRF authentication / permission / validation
  errors rendered in the same envelope.
"""

from __future__ import annotations

from datetime import datetime, timezone as dt_timezone
from unittest.mock import MagicMock

import pytest
from django.db import IntegrityError
from django.http import Http404
from freezegun import freeze_time
from rest_framework import exceptions as drf_exceptions

from modules.core.errors import (
    ACCESS_DENIED,
    AUTHENTICATION_REQUIRED,
    api_exception_handler,
    to_domain_error,
    translate,
)
from modules.core.exceptions import (
    ConcurrentModificationError,
    ConstraintViolation,
    DuplicateError,
    ErrorKind,
    NotFoundError,
    UnexpectedError,
    ValidationFailure,
)
from modules.core.repositories.exceptions import (
    DuplicateKey,
    IntegrityViolation,
    RecordNotFound,
    VersionConflict,
)
from modules.products.exceptions import (
    ConcurrentModification,
    DuplicateProduct,
    ProductNotFound,
)

pytestmark = pytest.mark.unit

PATH = "/api/v1/products/1/price/"


# ===========================================================================
# translate
# ===========================================================================


class TestTranslateStatus:
    @pytest.mark.parametrize(
        ("exc", "status", "status_text", "message"),
        [
            (ProductNotFound(7), 404, "Not Found", "Product not found with id: 7"),
            (DuplicateProduct("Steak"), 409, "Conflict", "Product with this name already exists"),
            (
                ConcurrentModification(1),
                409,
                "Conflict",
                "Resource was modified concurrently. Please retry.",
            ),
            (
                ValidationFailure(["Provide a not null price"]),
                400,
                "Bad Request",
                "Provide a not null price",
            ),
            (ConstraintViolation(), 409, "Conflict", "Database constraint violation"),
            (
                UnexpectedError(),
                500,
                "Internal Server Error",
                "An unexpected error occurred",
            ),
        ],
    )
    def test_each_kind(self, exc, status, status_text, message):
        body = translate(exc, PATH)

        assert body.status == status
        assert body.status_text == status_text
        assert body.message == message
        assert body.path == PATH

    def test_arbitrary_exception_hides_details(self):
        body = translate(RuntimeError("password=hunter2 leaked"), PATH)

        assert body.status == 500
        assert body.message == "An unexpected error occurred"

    def test_validation_messages_joined(self):
        body = translate(ValidationFailure(["first", "second"]), PATH)
        assert body.message == "first, second"


class TestEnvelope:
    def test_keys(self):
        body = translate(ProductNotFound(1), PATH).to_dict()
        assert set(body) == {"timestamp", "status", "statusText", "message", "path"}

    @freeze_time("2026-03-01 12:00:00")
    def test_timestamp_defaults_to_now(self):
        body = translate(ProductNotFound(1), PATH)
        assert body.timestamp == datetime(2026, 3, 1, 12, 0, tzinfo=dt_timezone.utc)

    def test_explicit_timestamp(self):
        moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=dt_timezone.utc)
        body = translate(ProductNotFound(1), PATH, timestamp=moment).to_dict()
        assert body["timestamp"].startswith("2024-01-02T03:04:05")


# ===========================================================================
# to_domain_error
# ===========================================================================


class TestToDomainError:
    def test_domain_error_passes_through(self):
        error = ProductNotFound(1)
        assert to_domain_error(error) is error

    @pytest.mark.parametrize(
        ("exc", "kind"),
        [
            (RecordNotFound(1), ErrorKind.NOT_FOUND),
            (DuplicateKey("name", "Steak"), ErrorKind.DUPLICATE),
            (VersionConflict(1, 0), ErrorKind.CONCURRENT_MODIFICATION),
            (IntegrityViolation("check"), ErrorKind.CONSTRAINT_VIOLATION),
            (IntegrityError("UNIQUE constraint failed"), ErrorKind.CONSTRAINT_VIOLATION),
            (KeyError("boom"), ErrorKind.UNEXPECTED),
        ],
    )
    def test_mapping(self, exc, kind):
        assert to_domain_error(exc).kind is kind

    @pytest.mark.parametrize(
        ("exc", "expected_type", "message"),
        [
            (RecordNotFound(3), NotFoundError, "Resource not found"),
            (DuplicateKey("name", "Steak"), DuplicateError, "Resource already exists"),
            (
                VersionConflict(3, 1),
                ConcurrentModificationError,
                "Resource was modified concurrently. Please retry.",
            ),
        ],
    )
    def test_store_errors_map_to_generic_errors(self, exc, expected_type, message):
        error = to_domain_error(exc)

        assert type(error) is expected_type
        assert error.message == message

    def test_product_errors_specialize_generic_errors(self):
        assert isinstance(ProductNotFound(1), NotFoundError)
        assert isinstance(DuplicateProduct("Steak"), DuplicateError)
        assert isinstance(ConcurrentModification(1), ConcurrentModificationError)


# ===========================================================================
# api_exception_handler
# ===========================================================================


def _context(path=PATH):
    request = MagicMock()
    request.path = path
    return {"request": request, "view": None}


class TestExceptionHandler:
    def test_not_authenticated(self):
        exc = drf_exceptions.NotAuthenticated()
        exc.auth_header = 'Bearer realm="api"'

        response = api_exception_handler(exc, _context())

        assert response.status_code == 401
        assert response.data["message"] == AUTHENTICATION_REQUIRED
        assert response["WWW-Authenticate"] == 'Bearer realm="api"'

    def test_permission_denied(self):
        response = api_exception_handler(drf_exceptions.PermissionDenied(), _context())

        assert response.status_code == 403
        assert response.data["statusText"] == "Forbidden"
        assert response.data["message"] == ACCESS_DENIED

    def test_drf_validation_error_is_flattened(self):
        exc = drf_exceptions.ValidationError({"price": ["required"], "non_field_errors": ["bad"]})

        response = api_exception_handler(exc, _context())

        assert response.status_code == 400
        assert response.data["message"] == "price: required, bad"

    def test_http404(self):
        response = api_exception_handler(Http404(), _context())
        assert response.status_code == 404

    def test_domain_error(self):
        response = api_exception_handler(ConcurrentModification(1), _context())

        assert response.status_code == 409
        assert response.data["path"] == PATH

    def test_unexpected_error(self):
        response = api_exception_handler(ZeroDivisionError("division by zero"), _context())

        assert response.status_code == 500
        assert response.data["message"] == "An unexpected error occurred"

    def test_throttled_sets_retry_after(self):
        response = api_exception_handler(drf_exceptions.Throttled(wait=12), _context())

        assert response.status_code == 429
        assert response["Retry-After"] == "12"
