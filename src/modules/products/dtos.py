"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
These are the contracts between the API layer and the Service layer.
DTOs are immutable (``frozen=True``).

- ``CreateProductDTO``: input for product creation.
- ``ChangePriceDTO``: input for a price change.

Every field is checked even when an earlier one already failed, so a
single ``ValidationError`` lists all the problems of a request.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modules.products.models import (
    DESCRIPTION_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PRICE_DECIMAL_PLACES,
    PRICE_MAX_DIGITS,
)

# ---------------------------------------------------------------------------
# Input DTOs
# ---------------------------------------------------------------------------


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``name`` is present, not blank and at most 255 characters.
    - ``description`` is at most 1000 characters.
    - ``price`` is present and greater than zero.
    """

    model_config = ConfigDict(frozen=True)

    name: Optional[str] = Field(default=None, validate_default=True)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(
        default=None,
        validate_default=True,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
    )

    @field_validator("name")
    @classmethod
    def name_must_not_be_blank(cls, v: Optional[str]) -> str:
        if v is None or not v.strip():
            raise ValueError("Product name must not be blank")
        v = v.strip()
        if len(v) > NAME_MAX_LENGTH:
            raise ValueError(
                f"Maximum number of characters for product name is {NAME_MAX_LENGTH}"
            )
        return v

    @field_validator("description")
    @classmethod
    def description_within_limit(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > DESCRIPTION_MAX_LENGTH:
            raise ValueError(
                f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters"
            )
        return v

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Optional[Decimal]) -> Decimal:
        if v is None:
            raise ValueError("Provide a not null price")
        if v <= 0:
            raise ValueError("Price value must be greater than 0")
        return v


class ChangePriceDTO(BaseModel):
    """Immutable DTO for ``PATCH /products/{id}/price/``."""

    model_config = ConfigDict(frozen=True)

    new_price: Optional[Decimal] = Field(
        default=None,
        validate_default=True,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
    )

    @field_validator("new_price")
    @classmethod
    def new_price_must_be_positive(cls, v: Optional[Decimal]) -> Decimal:
        if v is None:
            raise ValueError("New price must not be null")
        if v <= 0:
            raise ValueError("Price must be greater than 0")
        return v
