"""
Django admin configuration for catalog models.
"""

from django.contrib import admin

from catalog.models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    """Admin configuration for Product model."""

    list_display = [
        "title",
        "category",
        "price_cents",
        "stock",
        "is_active",
        "sort_order",
        "updated_at",
    ]
    list_filter = ["is_active", "category"]
    list_editable = ["is_active", "sort_order"]
    search_fields = ["title", "stripe_product_id", "square_catalog_object_id"]
    ordering = ["category", "sort_order", "title"]
    readonly_fields = ["id", "stock", "created_at", "updated_at"]

    fieldsets = (
        (None, {"fields": ("id", "title", "description", "image_url", "category")}),
        ("Pricing", {"fields": ("price_cents", "original_price_cents")}),
        ("Availability", {"fields": ("stock", "is_active", "sort_order")}),
        (
            "Providers",
            {
                "fields": (
                    "stripe_product_id",
                    "stripe_price_id",
                    "square_catalog_object_id",
                    "square_variation_id",
                ),
                "classes": ("collapse",),
            },
        ),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
