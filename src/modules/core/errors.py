"""Error translation: exceptions -> standard error envelope.

``translate`` is a pure function (no request, no Django response) so
the mapping can be tested on its own.  ``api_exception_handler`` is the
thin DRF adapter installed as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]``.

Envelope::

    {"timestamp": ..., "status": 409, "statusText": "Conflict",
     "message": "...", "path": "/api/v1/products/1/price/"}
"""

from __future__ import annotations

from datetime import datetime
from http import HTTPStatus
from typing import Any, Dict, Optional

import structlog
from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import IntegrityError
from django.http import Http404
from django.utils import timezone
from pydantic import BaseModel, ConfigDict, Field
from rest_framework import exceptions as drf_exceptions
from rest_framework.response import Response
from rest_framework.views import set_rollback

from modules.core.exceptions import (
    ConcurrentModificationError,
    ConstraintViolation,
    DomainError,
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
    StoreError,
    VersionConflict,
)

logger = structlog.get_logger(__name__)

STATUS_BY_KIND: Dict[ErrorKind, HTTPStatus] = {
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.DUPLICATE: HTTPStatus.CONFLICT,
    ErrorKind.CONCURRENT_MODIFICATION: HTTPStatus.CONFLICT,
    ErrorKind.VALIDATION_FAILURE: HTTPStatus.BAD_REQUEST,
    ErrorKind.CONSTRAINT_VIOLATION: HTTPStatus.CONFLICT,
    ErrorKind.UNEXPECTED: HTTPStatus.INTERNAL_SERVER_ERROR,
}

AUTHENTICATION_REQUIRED = "Authentication is required to access this resource"
ACCESS_DENIED = "You do not have permission to access this resource"


class ErrorResponse(BaseModel):
    """Standard error body returned by every failing API call."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    timestamp: datetime
    status: int
    status_text: str = Field(alias="statusText")
    message: str
    path: str

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


def build_error_response(
    status: HTTPStatus,
    message: str,
    path: str,
    timestamp: Optional[datetime] = None,
) -> ErrorResponse:
    return ErrorResponse(
        timestamp=timestamp or timezone.now(),
        status=status.value,
        status_text=status.phrase,
        message=message,
        path=path,
    )


def to_domain_error(exc: BaseException) -> DomainError:
    """Normalize any exception into the domain taxonomy."""
    if isinstance(exc, DomainError):
        return exc
    if isinstance(exc, StoreError):
        return _from_store_error(exc)
    if isinstance(exc, IntegrityError):
        return ConstraintViolation()
    return UnexpectedError()


def translate(
    exc: BaseException, path: str, timestamp: Optional[datetime] = None
) -> ErrorResponse:
    """Map an exception to the envelope the boundary returns."""
    error = to_domain_error(exc)
    status = STATUS_BY_KIND[error.kind]
    message = error.message
    if error.kind is ErrorKind.UNEXPECTED:
        message = UnexpectedError.default_message
    return build_error_response(status, message, path, timestamp)


def _from_store_error(exc: StoreError) -> DomainError:
    if isinstance(exc, RecordNotFound):
        return NotFoundError()
    if isinstance(exc, DuplicateKey):
        return DuplicateError()
    if isinstance(exc, VersionConflict):
        return ConcurrentModificationError()
    if isinstance(exc, IntegrityViolation):
        return ConstraintViolation()
    return UnexpectedError()


# ---------------------------------------------------------------------------
# DRF adapter
# ---------------------------------------------------------------------------


def api_exception_handler(exc: Exception, context: Dict[str, Any]) -> Response:
    """DRF exception handler producing the standard envelope for every error."""
    request = context.get("request")
    path = request.path if request is not None else ""
    headers: Dict[str, str] = {}

    if isinstance(exc, Http404):
        exc = drf_exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = drf_exceptions.PermissionDenied()

    if isinstance(exc, (drf_exceptions.NotAuthenticated, drf_exceptions.AuthenticationFailed)):
        body = build_error_response(HTTPStatus(exc.status_code), AUTHENTICATION_REQUIRED, path)
        auth_header = getattr(exc, "auth_header", None)
        if auth_header:
            headers["WWW-Authenticate"] = auth_header
    elif isinstance(exc, drf_exceptions.PermissionDenied):
        body = build_error_response(HTTPStatus.FORBIDDEN, ACCESS_DENIED, path)
    elif isinstance(exc, drf_exceptions.ValidationError):
        body = translate(ValidationFailure(_flatten_detail(exc.detail)), path)
    elif isinstance(exc, drf_exceptions.APIException):
        wait = getattr(exc, "wait", None)
        if wait:
            headers["Retry-After"] = str(int(wait))
        body = build_error_response(
            HTTPStatus(exc.status_code), " ".join(_flatten_detail(exc.detail)), path
        )
    else:
        error = to_domain_error(exc)
        if error.kind is ErrorKind.UNEXPECTED:
            logger.exception("api.unhandled_exception", path=path)
        else:
            logger.info("api.domain_error", kind=error.kind.value, path=path)
        body = translate(error, path)

    set_rollback()
    return Response(body.to_dict(), status=body.status, headers=headers or None)


def _flatten_detail(detail: Any) -> list:
    """Collect every message of a DRF error detail (str, list or dict)."""
    if isinstance(detail, dict):
        messages = []
        for field, value in detail.items():
            for message in _flatten_detail(value):
                messages.append(message if field == "non_field_errors" else f"{field}: {message}")
        return messages
    if isinstance(detail, (list, tuple)):
        return [message for item in detail for message in _flatten_detail(item)]
    return [str(detail)]
