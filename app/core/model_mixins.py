"""
Reusable model mixins.

Usage:
    from core.model_mixins import UUIDPrimaryKeyMixin
    from core.models import BaseModel

    class Order(UUIDPrimaryKeyMixin, BaseModel):
        total_cents = models.PositiveIntegerField()

Note:
    Always list mixins before BaseModel in inheritance.
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use UUID as primary key instead of auto-increment integer.

    Order and product ids leave the system (Stripe metadata, Square
    reference ids, receipt emails), so they must not be guessable.

    Fields:
        id: UUIDField as primary key (auto-generated)

    Usage:
        order = Order.objects.create(total_cents=500)
        print(order.id)  # 550e8400-e29b-41d4-a716-446655440000
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier (UUID v4)",
    )

    class Meta:
        abstract = True
