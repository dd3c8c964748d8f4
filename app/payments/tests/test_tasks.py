"""
Tests for payment housekeeping tasks.
"""

from datetime import timedelta

import pytest
from django.test import override_settings
from django.utils import timezone
from freezegun import freeze_time

from payments.models import WebhookEvent
from payments.state_machines import WebhookEventStatus
from payments.tasks import cleanup_old_webhook_events, cleanup_stuck_webhooks
from payments.tests.factories import WebhookEventFactory


@pytest.mark.django_db
class TestCleanupStuckWebhooks:
    def test_fails_events_stuck_in_processing(self):
        with freeze_time(timezone.now() - timedelta(hours=1)):
            stuck = WebhookEventFactory(status=WebhookEventStatus.PROCESSING)
        recent = WebhookEventFactory(status=WebhookEventStatus.PROCESSING)

        result = cleanup_stuck_webhooks()

        stuck.refresh_from_db()
        recent.refresh_from_db()
        assert result == {"reset_count": 1}
        assert stuck.status == WebhookEventStatus.FAILED
        assert stuck.error_message == "Processing timed out"
        assert recent.status == WebhookEventStatus.PROCESSING

    def test_nothing_stuck(self, processed_webhook_event):
        assert cleanup_stuck_webhooks() == {"reset_count": 0}


@pytest.mark.django_db
class TestCleanupOldWebhookEvents:
    @override_settings(WEBHOOK_EVENT_RETENTION_DAYS=30)
    def test_deletes_old_processed_events(self):
        old = timezone.now() - timedelta(days=45)
        WebhookEventFactory(status=WebhookEventStatus.PROCESSED, processed_at=old)
        failed = WebhookEventFactory(status=WebhookEventStatus.FAILED, error_message="boom")
        fresh = WebhookEventFactory(
            status=WebhookEventStatus.PROCESSED, processed_at=timezone.now()
        )

        result = cleanup_old_webhook_events()

        assert result == {"deleted_count": 1}
        assert set(WebhookEvent.objects.values_list("pk", flat=True)) == {failed.pk, fresh.pk}

    def test_days_argument_overrides_setting(self):
        WebhookEventFactory(
            status=WebhookEventStatus.PROCESSED,
            processed_at=timezone.now() - timedelta(days=3),
        )

        assert cleanup_old_webhook_events(days=1) == {"deleted_count": 1}
