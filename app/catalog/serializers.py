"""
Serializers for catalog endpoints.
"""

from rest_framework import serializers

from catalog.models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Public product representation. Prices are in cents."""

    class Meta:
        model = Product
        fields = [
            "id",
            "title",
            "description",
            "image_url",
            "category",
            "price_cents",
            "original_price_cents",
            "stock",
            "is_active",
            "sort_order",
        ]
        read_only_fields = fields


class AdminProductSerializer(ProductSerializer):
    """Product representation for administrators, with provider ids."""

    class Meta(ProductSerializer.Meta):
        fields = ProductSerializer.Meta.fields + [
            "stripe_product_id",
            "stripe_price_id",
            "square_catalog_object_id",
            "square_variation_id",
            "created_at",
            "updated_at",
        ]
        read_only_fields = fields


class StockUpdateSerializer(serializers.Serializer):
    stock = serializers.IntegerField(min_value=0)


class SyncSummarySerializer(serializers.Serializer):
    synced = serializers.IntegerField()
    created = serializers.IntegerField()
    updated = serializers.IntegerField()
    skipped = serializers.IntegerField()
