"""Product model.

Business rules implemented at the storage level:
- ``name`` is unique across the catalog (UNIQUE INDEX).
- ``price`` is strictly positive (CHECK constraint).
- ``version`` guards every update (see ``ProductDjangoRepository.save``).
"""

from __future__ import annotations

from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import VersionedModel

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000
PRICE_MAX_DIGITS = 19
PRICE_DECIMAL_PLACES = 4


class Product(VersionedModel):
    """Product aggregate root."""

    name = models.CharField(max_length=NAME_MAX_LENGTH, unique=True)
    description = models.CharField(
        max_length=DESCRIPTION_MAX_LENGTH,
        null=True,
        blank=True,
        default=None,
    )
    price = models.DecimalField(
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        validators=[MinValueValidator(Decimal("0.0001"))],
    )

    class Meta:
        db_table = "products"
        ordering = ["id"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.name} (v{self.version})"
