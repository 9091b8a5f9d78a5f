"""Product DRF serializers for API output.

The serializer operates at the Interface layer (API Views) and renders
the public camelCase representation.  Input is validated by the
Pydantic DTOs in ``dtos.py`` before it reaches the Service Layer.
"""

from __future__ import annotations

from rest_framework import serializers

from modules.products.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Read serializer for the Product resource."""

    isActive = serializers.BooleanField(source="is_active", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    formattedPrice = serializers.CharField(source="formatted_price", read_only=True)
    isAvailable = serializers.BooleanField(source="is_available", read_only=True)

    class Meta:
        model = Product
        fields = [
            "id",
            "name",
            "description",
            "price",
            "category",
            "stock",
            "isActive",
            "isAvailable",
            "formattedPrice",
            "createdAt",
            "updatedAt",
        ]
        read_only_fields = ["id"]
