"""Django ORM implementation of the Product repository.

Satisfies ``IProductRepository`` using Django's QuerySet API.

Concurrency: ``save`` is a single ``UPDATE ... WHERE id = %s AND
version = %s`` that also bumps the version, so the check and the write
are one atomic statement.  No row locks are held between the caller's
read and this write.

Every write runs in its own savepoint so an ``IntegrityError`` never
leaves a partial write or poisons an outer transaction.
"""

from __future__ import annotations

from typing import Any, List, Optional

import structlog
from django.core.exceptions import ValidationError
from django.db import IntegrityError, transaction
from django.db.models import F
from django.utils import timezone

from modules.core.models import INITIAL_VERSION
from modules.core.repositories.exceptions import (
    DuplicateKey,
    IntegrityViolation,
    RecordNotFound,
    StoreError,
    VersionConflict,
)
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    def insert(self, entity: Product) -> Product:
        now = timezone.now()
        entity.created_at = now
        entity.updated_at = now
        entity.version = INITIAL_VERSION
        try:
            with transaction.atomic():
                entity.save(force_insert=True)
        except IntegrityError as exc:
            raise self._classify(exc, entity) from exc
        logger.info("product.inserted", product_id=entity.id)
        return entity

    def find_by_id(self, id: Any) -> Product:
        try:
            product = Product.objects.filter(pk=id).first()
        except (ValueError, TypeError, ValidationError):
            product = None
        if product is None:
            raise RecordNotFound(id)
        return product

    def find_all(self) -> List[Product]:
        return list(Product.objects.all())

    def exists_by_id(self, id: Any) -> bool:
        try:
            return Product.objects.filter(pk=id).exists()
        except (ValueError, TypeError, ValidationError):
            return False

    def save(self, entity: Product, expected_version: int) -> Product:
        """Compare-and-swap write of the mutable fields."""
        now = timezone.now()
        try:
            with transaction.atomic():
                updated = Product.objects.filter(
                    pk=entity.pk, version=expected_version
                ).update(
                    name=entity.name,
                    description=entity.description,
                    price=entity.price,
                    updated_at=now,
                    version=F("version") + 1,
                )
        except IntegrityError as exc:
            raise self._classify(exc, entity) from exc

        if not updated:
            if not self.exists_by_id(entity.pk):
                raise RecordNotFound(entity.pk)
            logger.warning(
                "product.version_conflict",
                product_id=entity.pk,
                expected_version=expected_version,
            )
            raise VersionConflict(entity.pk, expected_version)

        entity.version = expected_version + 1
        entity.updated_at = now
        return entity

    def delete_by_id(self, id: Any, expected_version: Optional[int] = None) -> None:
        try:
            queryset = Product.objects.filter(pk=id)
            if expected_version is not None:
                queryset = queryset.filter(version=expected_version)
            with transaction.atomic():
                deleted, _ = queryset.delete()
        except (ValueError, TypeError, ValidationError):
            deleted = 0

        if not deleted:
            if expected_version is not None and self.exists_by_id(id):
                raise VersionConflict(id, expected_version)
            raise RecordNotFound(id)
        logger.info("product.removed", product_id=id)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _classify(exc: IntegrityError, entity: Product) -> StoreError:
        """Tell a name collision apart from any other integrity failure.

        Backends word unique-violation messages differently, so the
        collision is confirmed with a query instead of parsing ``exc``.
        """
        clash = Product.objects.filter(name=entity.name)
        if entity.pk is not None:
            clash = clash.exclude(pk=entity.pk)
        if clash.exists():
            return DuplicateKey("name", entity.name)
        return IntegrityViolation(str(exc))
