"""
WebhookEvent model for provider webhook tracking.

Stores every verified webhook delivery from Stripe and Square for audit
and short-circuiting of redeliveries. Correctness of order completion does
not depend on this table: the order's stock_decremented flag is the
exactly-once guard. A redelivery that slips past this table (for example
because the first attempt is still running) is still harmless.

Usage:
    from payments.models import WebhookEvent
    from payments.state_machines import PaymentProvider, WebhookEventStatus

    event, created = WebhookEvent.objects.get_or_create(
        provider=PaymentProvider.STRIPE,
        event_id="evt_1234567890",
        defaults={
            "event_type": "checkout.session.completed",
            "payload": payload,
        },
    )

    if event.is_processed:
        return JsonResponse({"received": True})
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from payments.state_machines import PaymentProvider, WebhookEventStatus


class WebhookEvent(UUIDPrimaryKeyMixin, BaseModel):
    """
    Tracks provider webhook events.

    Processing Flow:
        1. Webhook arrives, verify signature
        2. Insert/get WebhookEvent with (provider, event_id)
        3. If exists and PROCESSED -> return 200 (duplicate)
        4. Set status to PROCESSING
        5. Route to the registered handler
        6. Set status to PROCESSED or FAILED
        7. If FAILED, the provider redelivers and we try again

    Fields:
        provider: Which provider sent the event
        event_id: Provider event id (evt_xxx / Square event_id)
        event_type: Type of webhook event
        payload: Full JSON payload
        status: Processing status
        processed_at: When event was successfully processed
        error_message: Error details if processing failed
        attempts: Number of processing attempts
    """

    # ==========================================================================
    # Event Identification
    # ==========================================================================

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        help_text="Provider that sent the event",
    )

    event_id = models.CharField(
        max_length=255,
        help_text="Provider event id, unique per provider",
    )

    event_type = models.CharField(
        max_length=100,
        db_index=True,
        help_text="Provider event type (e.g., 'checkout.session.completed')",
    )

    payload = models.JSONField(
        help_text="Full webhook payload (JSON)",
    )

    # ==========================================================================
    # Processing Status
    # ==========================================================================

    status = models.CharField(
        max_length=20,
        choices=WebhookEventStatus.choices,
        default=WebhookEventStatus.PENDING,
        db_index=True,
        help_text="Current processing status",
    )

    processed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When event was successfully processed",
    )

    error_message = models.TextField(
        null=True,
        blank=True,
        help_text="Error message if processing failed",
    )

    attempts = models.PositiveSmallIntegerField(
        default=0,
        help_text="Number of processing attempts",
    )

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Webhook Event"
        verbose_name_plural = "Webhook Events"
        constraints = [
            models.UniqueConstraint(
                fields=["provider", "event_id"],
                name="webhook_event_unique_per_provider",
            ),
        ]
        indexes = [
            models.Index(fields=["status", "created_at"], name="webhook_status_created_idx"),
        ]

    def __str__(self) -> str:
        return f"WebhookEvent({self.provider}:{self.event_id}, {self.event_type})"

    @property
    def is_processed(self) -> bool:
        return self.status == WebhookEventStatus.PROCESSED

    # ==========================================================================
    # Helper Methods
    # ==========================================================================

    def mark_processing(self) -> None:
        """
        Mark event as being processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSING
        self.attempts += 1

    def mark_processed(self) -> None:
        """
        Mark event as successfully processed.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.PROCESSED
        self.processed_at = timezone.now()
        self.error_message = None

    def mark_failed(self, error_message: str) -> None:
        """
        Mark event as failed with error message.

        Note: Does not save - caller must save after calling.
        """
        self.status = WebhookEventStatus.FAILED
        self.error_message = error_message[:2000]

    def get_object_id(self) -> str | None:
        """
        Extract the primary object id from the payload.

        Stripe nests it at data.object.id; Square at data.id.
        """
        data = self.payload.get("data") if isinstance(self.payload, dict) else None
        if not isinstance(data, dict):
            return None
        obj = data.get("object")
        if self.provider == PaymentProvider.STRIPE and isinstance(obj, dict):
            return obj.get("id")
        return data.get("id")
