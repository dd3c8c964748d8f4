"""
Celery tasks for payment housekeeping.

This module provides periodic tasks for:
- Purging old processed webhook events
- Resetting webhook events stuck in PROCESSING

Webhooks themselves are processed synchronously in the request; these
tasks only keep the audit table tidy.

Usage:
    from payments.tasks import cleanup_old_webhook_events

    cleanup_old_webhook_events.delay()
"""

from __future__ import annotations

import logging
from datetime import timedelta

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus

logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

STUCK_PROCESSING_THRESHOLD_MINUTES = 30


@shared_task
def cleanup_stuck_webhooks() -> dict:
    """
    Periodic task to mark stuck webhook events as failed.

    An event left in PROCESSING means the worker died mid-request. The
    provider redelivers on its own schedule and the webhook view reprocesses
    any event that is not PROCESSED, so this only keeps the audit table
    truthful.

    Returns:
        Dict with count of webhooks reset
    """
    threshold = timezone.now() - timedelta(minutes=STUCK_PROCESSING_THRESHOLD_MINUTES)

    stuck_webhooks = WebhookEvent.objects.filter(
        status=WebhookEventStatus.PROCESSING,
        updated_at__lt=threshold,
    )

    reset_count = 0
    for webhook in stuck_webhooks:
        webhook.mark_failed("Processing timed out")
        webhook.save(update_fields=["status", "error_message", "updated_at"])
        reset_count += 1
        logger.warning(
            "Reset stuck webhook",
            extra={
                "webhook_event_id": str(webhook.id),
                "provider": webhook.provider,
                "event_id": webhook.event_id,
            },
        )

    if reset_count > 0:
        logger.info(
            f"Reset {reset_count} stuck webhooks",
            extra={"reset_count": reset_count},
        )

    return {"reset_count": reset_count}


@shared_task
def cleanup_old_webhook_events(days: int | None = None) -> dict:
    """
    Periodic task to delete old processed webhook events.

    Failed events are kept for debugging.

    Args:
        days: Age threshold; defaults to WEBHOOK_EVENT_RETENTION_DAYS

    Returns:
        Dict with count of webhooks deleted
    """
    if days is None:
        days = settings.WEBHOOK_EVENT_RETENTION_DAYS
    cutoff = timezone.now() - timedelta(days=days)

    deleted_count, _ = WebhookEvent.objects.filter(
        status=WebhookEventStatus.PROCESSED,
        processed_at__lt=cutoff,
    ).delete()

    if deleted_count > 0:
        logger.info(
            f"Deleted {deleted_count} old webhook events",
            extra={
                "deleted_count": deleted_count,
                "cutoff_date": cutoff.isoformat(),
            },
        )

    return {"deleted_count": deleted_count}
