"""
State enums for order models.

Order States:
    pending → processing → completed → refunded
    pending → completed (webhook skipped payment.created)
    pending | processing → cancelled (payment failed)
"""

from django.db import models


class OrderStatus(models.TextChoices):
    """
    Lifecycle status of a storefront order.

    State Flow:
        PENDING: created at checkout, buyer sent to the provider
        PROCESSING: provider reported a payment attempt
        COMPLETED: payment succeeded, stock decremented (terminal for webhooks)
        CANCELLED: payment failed or was cancelled
        REFUNDED: refunded by an administrator
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    CANCELLED = "cancelled", "Cancelled"
    REFUNDED = "refunded", "Refunded"
