"""Generic repository interface (Dependency Inversion Principle).

Provides ``IRepository[T]``, the base abstract class that all
domain-specific repository interfaces extend.  Service-layer code
depends on this abstraction, never on Django ORM directly.

Writes to existing records are compare-and-swap on a version counter:
the caller passes the version it read and the write only lands if the
stored version still matches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Generic, List, Optional, TypeVar

T = TypeVar("T")


class IRepository(ABC, Generic[T]):
    """Base generic repository contract.

    Type parameter ``T`` represents the domain entity managed by the
    repository (e.g. ``Product``).  Failures are reported with the
    exceptions in ``modules.core.repositories.exceptions``.
    """

    @abstractmethod
    def insert(self, entity: T) -> T:
        """Persist a new entity, assigning id, version and timestamps.

        Raises ``DuplicateKey`` on a unique-key collision.
        """

    @abstractmethod
    def find_by_id(self, id: Any) -> T:
        """Return the entity or raise ``RecordNotFound``."""

    @abstractmethod
    def find_all(self) -> List[T]:
        """Return every entity."""

    @abstractmethod
    def exists_by_id(self, id: Any) -> bool:
        """Tell whether an entity with this id exists."""

    @abstractmethod
    def save(self, entity: T, expected_version: int) -> T:
        """Write ``entity`` only if the stored version equals ``expected_version``.

        Raises ``VersionConflict`` when it does not, ``RecordNotFound``
        when the record is gone and ``DuplicateKey`` on a unique-key
        collision.  Nothing is written in any of those cases.
        """

    @abstractmethod
    def delete_by_id(self, id: Any, expected_version: Optional[int] = None) -> None:
        """Remove an entity.

        Raises ``RecordNotFound`` if absent.  With ``expected_version``
        the delete is conditional and raises ``VersionConflict`` on a
        mismatch.
        """
