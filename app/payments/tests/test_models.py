"""
Tests for the WebhookEvent model.
"""

import pytest
from django.contrib import admin
from django.db import IntegrityError

from payments.models import WebhookEvent
from payments.state_machines import PaymentProvider, WebhookEventStatus
from payments.tests.factories import WebhookEventFactory


@pytest.mark.django_db
class TestWebhookEvent:
    def test_event_id_unique_per_provider(self):
        WebhookEventFactory(provider=PaymentProvider.STRIPE, event_id="evt_1")

        with pytest.raises(IntegrityError):
            WebhookEventFactory(provider=PaymentProvider.STRIPE, event_id="evt_1")

    def test_same_event_id_allowed_across_providers(self):
        WebhookEventFactory(provider=PaymentProvider.STRIPE, event_id="evt_1")
        square = WebhookEventFactory(provider=PaymentProvider.SQUARE, event_id="evt_1")

        assert square.pk is not None

    def test_mark_processing_counts_attempts(self, webhook_event):
        webhook_event.mark_processing()
        webhook_event.mark_processing()

        assert webhook_event.status == WebhookEventStatus.PROCESSING
        assert webhook_event.attempts == 2

    def test_mark_processed_clears_error(self, webhook_event):
        webhook_event.mark_failed("boom")
        webhook_event.mark_processed()

        assert webhook_event.is_processed
        assert webhook_event.processed_at is not None
        assert webhook_event.error_message is None

    def test_mark_failed_truncates_message(self, webhook_event):
        webhook_event.mark_failed("x" * 5000)

        assert webhook_event.status == WebhookEventStatus.FAILED
        assert len(webhook_event.error_message) == 2000

    def test_get_object_id_stripe(self, webhook_event):
        assert webhook_event.get_object_id() == "cs_test_123"

    def test_get_object_id_square(self):
        event = WebhookEventFactory(
            provider=PaymentProvider.SQUARE,
            event_type="payment.updated",
            payload={"event_id": "sq_evt", "data": {"id": "PAY_1", "object": {}}},
        )

        assert event.get_object_id() == "PAY_1"

    def test_get_object_id_without_data(self):
        event = WebhookEventFactory(payload={"id": "evt_x"})

        assert event.get_object_id() is None


@pytest.mark.django_db
class TestWebhookEventAdmin:
    def test_object_id_column(self, webhook_event):
        model_admin = admin.site._registry[WebhookEvent]

        assert "object_id" in model_admin.list_display
        assert model_admin.object_id(webhook_event) == "cs_test_123"

    def test_object_id_column_placeholder(self):
        model_admin = admin.site._registry[WebhookEvent]

        assert model_admin.object_id(WebhookEventFactory(payload={"id": "evt_x"})) == "-"
