"""Raw persistence failures raised by repository implementations.

These never cross the service layer: services translate them into
``modules.core.exceptions.DomainError`` subclasses.
"""

from __future__ import annotations

from typing import Any


class StoreError(Exception):
    """Base class for repository failures."""


class RecordNotFound(StoreError):
    def __init__(self, id: Any) -> None:
        self.id = id
        super().__init__(f"No record with id {id!r}")


class DuplicateKey(StoreError):
    """A unique key would be violated by the write."""

    def __init__(self, field: str, value: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Duplicate value for {field}: {value!r}")


class VersionConflict(StoreError):
    """The stored version no longer matches the one the caller read."""

    def __init__(self, id: Any, expected_version: int) -> None:
        self.id = id
        self.expected_version = expected_version
        super().__init__(
            f"Record {id!r} is no longer at version {expected_version}"
        )


class IntegrityViolation(StoreError):
    """Integrity failure that is not a unique-key collision."""
