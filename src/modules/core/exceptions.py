"""Domain error taxonomy shared by every module.

Service-layer code raises subclasses of ``DomainError``.  Each error
carries an ``ErrorKind``; the boundary layer maps kinds to responses
(see ``modules.core.errors``) and never inspects concrete classes.
"""

from __future__ import annotations

import enum
from typing import Iterable, List


class ErrorKind(str, enum.Enum):
    NOT_FOUND = "not_found"
    DUPLICATE = "duplicate"
    CONCURRENT_MODIFICATION = "concurrent_modification"
    VALIDATION_FAILURE = "validation_failure"
    CONSTRAINT_VIOLATION = "constraint_violation"
    UNEXPECTED = "unexpected"


class DomainError(Exception):
    """Base class for all domain errors."""

    kind: ErrorKind = ErrorKind.UNEXPECTED
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationFailure(DomainError):
    """One or more input constraints were violated.

    All violations are kept so the caller sees every problem at once.
    """

    kind = ErrorKind.VALIDATION_FAILURE

    def __init__(self, violations: Iterable[str]) -> None:
        self.violations: List[str] = [v for v in violations if v]
        super().__init__(", ".join(self.violations) or "Invalid request")

    @classmethod
    def from_pydantic(cls, exc) -> ValidationFailure:
        """Build from a ``pydantic.ValidationError``.

        Messages raised by our own field validators are used verbatim;
        pydantic's built-in messages are prefixed with the field name.
        """
        violations = []
        for error in exc.errors():
            ctx_error = (error.get("ctx") or {}).get("error")
            if error.get("type") == "value_error" and ctx_error is not None:
                violations.append(str(ctx_error))
                continue
            field = ".".join(str(part) for part in error.get("loc", ()))
            violations.append(f"{field}: {error['msg']}" if field else error["msg"])
        return cls(violations)


class NotFoundError(DomainError):
    """The addressed resource does not exist."""

    kind = ErrorKind.NOT_FOUND
    default_message = "Resource not found"


class DuplicateError(DomainError):
    """A unique key of the resource is already taken."""

    kind = ErrorKind.DUPLICATE
    default_message = "Resource already exists"


class ConcurrentModificationError(DomainError):
    """The resource changed between read and write.  The caller may retry."""

    kind = ErrorKind.CONCURRENT_MODIFICATION
    default_message = "Resource was modified concurrently. Please retry."


class ConstraintViolation(DomainError):
    """A storage integrity rule failed and no more specific error applies."""

    kind = ErrorKind.CONSTRAINT_VIOLATION
    default_message = "Database constraint violation"


class UnexpectedError(DomainError):
    """Anything we did not anticipate.  The message never carries detail."""

    kind = ErrorKind.UNEXPECTED
