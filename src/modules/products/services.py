"""Product service layer (Use Cases).

Orchestrates business logic for the Product aggregate, delegating
persistence to the injected ``IProductRepository``.

Business rules enforced here:
- Product names are unique (the store reports the collision).
- Price changes are optimistic: the version read is the version the
  write is conditioned on.  A lost race surfaces as
  ``ConcurrentModification`` and is never retried here.
- Delete checks existence first.

Raw repository failures never leave this module; they are re-raised as
domain errors.
"""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING, Any, List, Optional

import structlog

from modules.core.exceptions import ConstraintViolation, ValidationFailure
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
from modules.products.models import Product

if TYPE_CHECKING:
    from modules.products.dtos import CreateProductDTO
    from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductService:
    """Application service for Product use-cases.

    Receives an ``IProductRepository`` via constructor injection (DIP).
    Holds no state between calls.
    """

    def __init__(self, repository: IProductRepository) -> None:
        self._repo = repository

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def create_product(self, dto: CreateProductDTO) -> Product:
        """Create a new product.

        Raises:
            DuplicateProduct: if the name is already taken.
            ConstraintViolation: on any other integrity failure.
        """
        product = Product(
            name=dto.name,
            description=dto.description,
            price=dto.price,
        )
        try:
            product = self._repo.insert(product)
        except DuplicateKey as exc:
            logger.warning("product.duplicate_name", name=dto.name)
            raise DuplicateProduct(dto.name) from exc
        except IntegrityViolation as exc:
            logger.warning("product.create_rejected", name=dto.name, reason=str(exc))
            raise ConstraintViolation() from exc

        logger.info(
            "product.created",
            product_id=product.id,
            name=product.name,
            price=str(product.price),
        )
        return product

    def change_price(
        self,
        product_id: Any,
        new_price: Optional[Decimal],
        expected_version: Optional[int] = None,
    ) -> Product:
        """Set a new price under optimistic concurrency control.

        ``expected_version`` pins the version the caller saw; when
        omitted, the version read here is used.

        Raises:
            ValidationFailure: ``new_price`` is missing or not positive.
            ProductNotFound: the product does not exist.
            ConcurrentModification: the product changed since it was read.
        """
        violations = []
        if new_price is None:
            violations.append("New price must not be null")
        elif new_price <= 0:
            violations.append("Price must be greater than 0")
        if violations:
            raise ValidationFailure(violations)

        product = self.get_product(product_id)
        version = product.version if expected_version is None else expected_version
        old_price = product.price
        product.price = new_price

        log = logger.bind(product_id=product.id, expected_version=version)
        try:
            product = self._repo.save(product, expected_version=version)
        except RecordNotFound as exc:
            raise ProductNotFound(product_id) from exc
        except VersionConflict as exc:
            log.warning("product.price_change_conflict")
            raise ConcurrentModification(product_id) from exc
        except (DuplicateKey, IntegrityViolation) as exc:
            raise ConstraintViolation() from exc

        log.info(
            "product.price_changed",
            old_price=str(old_price),
            new_price=str(product.price),
            version=product.version,
        )
        return product

    def delete_product(self, product_id: Any, expected_version: Optional[int] = None) -> None:
        """Delete a product, optionally only if it is still at ``expected_version``.

        Raises:
            ProductNotFound: the product does not exist.
            ConcurrentModification: ``expected_version`` no longer matches.
        """
        if not self._repo.exists_by_id(product_id):
            logger.warning("product.delete_refused", product_id=product_id)
            raise ProductNotFound(product_id)

        try:
            self._repo.delete_by_id(product_id, expected_version=expected_version)
        except RecordNotFound as exc:
            raise ProductNotFound(product_id) from exc
        except VersionConflict as exc:
            logger.warning(
                "product.delete_conflict",
                product_id=product_id,
                expected_version=expected_version,
            )
            raise ConcurrentModification(product_id) from exc
        logger.info("product.deleted", product_id=product_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_products(self) -> List[Product]:
        """Return every product (a snapshot as of this call)."""
        return self._repo.find_all()

    def get_product(self, product_id: Any) -> Product:
        """Retrieve a single product by ID.

        Raises:
            ProductNotFound: if the product does not exist.
        """
        try:
            return self._repo.find_by_id(product_id)
        except RecordNotFound as exc:
            raise ProductNotFound(product_id) from exc
