"""Product domain exceptions.

Raised by the Service Layer when business rules are violated.
The API layer never catches these itself: the DRF exception handler
translates them into the standard error envelope.
"""

from __future__ import annotations

from typing import Any

from modules.core.exceptions import (
    ConcurrentModificationError,
    DuplicateError,
    NotFoundError,
)


class ProductNotFound(NotFoundError):
    """The requested product does not exist."""

    def __init__(self, product_id: Any) -> None:
        self.product_id = product_id
        super().__init__(f"Product not found with id: {product_id}")


class DuplicateProduct(DuplicateError):
    """A product with the same name already exists."""

    default_message = "Product with this name already exists"

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__()


class ConcurrentModification(ConcurrentModificationError):
    """The product changed between read and write.  The caller may retry."""

    def __init__(self, product_id: Any) -> None:
        self.product_id = product_id
        super().__init__()
