"""
Initial catalog schema: Product with a non-negative stock constraint.
"""

import uuid

from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True,
                        db_index=True,
                        help_text="Timestamp when this record was created",
                    ),
                ),
                (
                    "updated_at",
                    models.DateTimeField(
                        auto_now=True,
                        help_text="Timestamp when this record was last modified",
                    ),
                ),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier (UUID v4)",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, default="")),
                ("image_url", models.URLField(blank=True, max_length=1000, null=True)),
                (
                    "category",
                    models.CharField(db_index=True, default="items", max_length=50),
                ),
                (
                    "price_cents",
                    models.PositiveIntegerField(default=0, help_text="Unit price in cents"),
                ),
                (
                    "original_price_cents",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Pre-discount unit price in cents, shown struck through",
                        null=True,
                    ),
                ),
                (
                    "stock",
                    models.IntegerField(
                        default=0,
                        help_text="Units available; decremented when an order completes",
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("sort_order", models.IntegerField(default=0)),
                (
                    "stripe_product_id",
                    models.CharField(blank=True, max_length=255, null=True, unique=True),
                ),
                ("stripe_price_id", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "square_catalog_object_id",
                    models.CharField(blank=True, max_length=255, null=True, unique=True),
                ),
                (
                    "square_variation_id",
                    models.CharField(blank=True, max_length=255, null=True),
                ),
            ],
            options={
                "ordering": ["category", "sort_order", "title"],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("stock__gte", 0)),
                        name="product_stock_non_negative",
                    ),
                ],
            },
        ),
    ]
