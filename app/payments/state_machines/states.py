"""
State enums for payment models.

These are Django TextChoices for database storage and admin integration.

WebhookEvent States:
    pending → processing → processed
    pending → processing → failed → processing (provider redelivery)
"""

from django.db import models


class WebhookEventStatus(models.TextChoices):
    """
    Processing status for WebhookEvent.

    Tracks the lifecycle of webhook event processing for idempotency.

    State Flow:
        PENDING → PROCESSING → PROCESSED
        PENDING → PROCESSING → FAILED (provider redelivers)
    """

    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    PROCESSED = "processed", "Processed"
    FAILED = "failed", "Failed"


class PaymentProvider(models.TextChoices):
    """
    Payment providers the store checks out through.

    Determines which session ids an Order carries and which webhook
    endpoint reports its outcome.
    """

    STRIPE = "stripe", "Stripe"
    SQUARE = "square", "Square"
