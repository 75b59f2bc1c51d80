"""Product API views.

Exposes the ``ProductService`` via HTTP using a DRF ViewSet.
Views parse input into DTOs and call the service; every failure
propagates to ``modules.core.errors.api_exception_handler``, which
renders the standard error envelope.

Access: reads need ``USER`` or ``ADMIN``; writes need ``ADMIN``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet

from modules.core.exceptions import ValidationFailure
from modules.core.permissions import ROLE_ADMIN, ROLE_USER, require_roles, roles_for
from modules.products.dtos import ChangePriceDTO, CreateProductDTO
from modules.products.repositories.django_repository import ProductDjangoRepository
from modules.products.serializers import ProductSerializer
from modules.products.services import ProductService

_ACTION_ROLES = {
    **roles_for(("list", "retrieve"), ROLE_USER, ROLE_ADMIN),
    **roles_for(("create", "change_price", "destroy"), ROLE_ADMIN),
}
_DEFAULT_ROLE = require_roles(ROLE_ADMIN)


def _body(request: Request) -> Dict[str, Any]:
    data = request.data
    if not isinstance(data, dict):
        raise ValidationFailure(["Request body must be a JSON object"])
    return data


def _expected_version(request: Request) -> Optional[int]:
    """Read the optional ``If-Match: <version>`` header."""
    raw = request.headers.get("If-Match")
    if raw is None:
        return None
    value = raw.strip()
    if value.startswith("W/"):
        value = value[2:]
    value = value.strip('"')
    # isdigit() alone also accepts digits int() cannot parse, such as "²".
    if not (value.isascii() and value.isdigit()):
        raise ValidationFailure(["If-Match header must be a product version number"])
    return int(value)


class ProductViewSet(GenericViewSet):
    """ViewSet for the product lifecycle.

    Uses ``ProductService`` with ``ProductDjangoRepository`` (DIP).
    All ORM access goes through the service/repository layer.
    """

    serializer_class = ProductSerializer
    pagination_class = None

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        self._service = ProductService(repository=ProductDjangoRepository())

    def get_permissions(self):
        role = _ACTION_ROLES.get(self.action, _DEFAULT_ROLE)
        return [IsAuthenticated(), role()]

    # ------------------------------------------------------------------
    # List / Retrieve
    # ------------------------------------------------------------------

    def list(self, request: Request) -> Response:
        """GET /api/v1/products/"""
        products = self._service.list_products()
        return Response(ProductSerializer(products, many=True).data)

    def retrieve(self, request: Request, pk: str | None = None) -> Response:
        """GET /api/v1/products/{pk}/"""
        product = self._service.get_product(pk)
        return Response(ProductSerializer(product).data)

    # ------------------------------------------------------------------
    # Create / Change price / Destroy
    # ------------------------------------------------------------------

    def create(self, request: Request) -> Response:
        """POST /api/v1/products/"""
        data = _body(request)
        try:
            dto = CreateProductDTO(
                name=data.get("name"),
                description=data.get("description"),
                price=data.get("price"),
            )
        except PydanticValidationError as exc:
            raise ValidationFailure.from_pydantic(exc) from exc

        product = self._service.create_product(dto)
        return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"], url_path="price")
    def change_price(self, request: Request, pk: str | None = None) -> Response:
        """PATCH /api/v1/products/{pk}/price/

        Accepts ``{"new_price": "12.50"}`` and an optional ``If-Match``.
        """
        data = _body(request)
        try:
            dto = ChangePriceDTO(new_price=data.get("new_price"))
        except PydanticValidationError as exc:
            raise ValidationFailure.from_pydantic(exc) from exc

        product = self._service.change_price(
            pk, dto.new_price, expected_version=_expected_version(request)
        )
        return Response(ProductSerializer(product).data)

    def destroy(self, request: Request, pk: str | None = None) -> Response:
        """DELETE /api/v1/products/{pk}/"""
        self._service.delete_product(pk, expected_version=_expected_version(request))
        return Response(status=status.HTTP_204_NO_CONTENT)
