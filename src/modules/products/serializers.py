"""Product DRF serializers for API output.

Input is parsed into Pydantic DTOs (``dtos.py``); this serializer only
renders ``Product`` instances returned by the service.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read-only representation of the Product resource."""

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "version",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields
