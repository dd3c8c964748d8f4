"""
Catalog models.

Product rows are written by three sources: Stripe product/price webhooks,
the Square catalog sync and administrators. Stock is mutated only through
catalog.services.StockLedger.
"""

from __future__ import annotations

from decimal import Decimal

from django.db import models

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel

DEFAULT_CATEGORY = "items"

# Stock given to provider products that don't declare one
UNTRACKED_STOCK = 999


class ProductQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)

    def in_category(self, category: str):
        return self.filter(category=category.lower())


class Product(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchasable item.

    Fields:
        title, description, image_url: Display data
        category: Free-text storefront tab, lower-cased
        price_cents: Authoritative unit price in cents
        original_price_cents: Strike-through price (optional)
        stock: Units available, never negative
        is_active: Whether the product can be bought
        sort_order: Position within its category
        stripe_product_id / stripe_price_id: Stripe identifiers
        square_catalog_object_id / square_variation_id: Square identifiers
    """

    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    image_url = models.URLField(max_length=1000, blank=True, null=True)
    category = models.CharField(
        max_length=50,
        default=DEFAULT_CATEGORY,
        db_index=True,
    )

    price_cents = models.PositiveIntegerField(
        default=0,
        help_text="Unit price in cents",
    )
    original_price_cents = models.PositiveIntegerField(
        null=True,
        blank=True,
        help_text="Pre-discount unit price in cents, shown struck through",
    )

    stock = models.IntegerField(
        default=0,
        help_text="Units available; decremented when an order completes",
    )
    is_active = models.BooleanField(default=True, db_index=True)
    sort_order = models.IntegerField(default=0)

    stripe_product_id = models.CharField(max_length=255, unique=True, null=True, blank=True)
    stripe_price_id = models.CharField(max_length=255, null=True, blank=True)
    square_catalog_object_id = models.CharField(
        max_length=255, unique=True, null=True, blank=True
    )
    square_variation_id = models.CharField(max_length=255, null=True, blank=True)

    objects = ProductQuerySet.as_manager()

    class Meta:
        ordering = ["category", "sort_order", "title"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(stock__gte=0),
                name="product_stock_non_negative",
            ),
        ]

    def __str__(self) -> str:
        return self.title

    @property
    def price(self) -> Decimal:
        """Unit price in dollars."""
        return Decimal(self.price_cents) / 100
