"""Product repository interface.

Narrows ``IRepository[Product]``.  Name uniqueness is enforced by the
store itself (``DuplicateKey``), never by a look-up before the write,
so two concurrent creates cannot both succeed.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from modules.core.repositories.interfaces import IRepository

if TYPE_CHECKING:
    from modules.products.models import Product  # noqa: F401


class IProductRepository(IRepository["Product"]):
    """Repository contract for the Product aggregate."""
