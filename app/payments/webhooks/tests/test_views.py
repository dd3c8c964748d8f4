"""
Tests for webhook views.

Tests cover:
- Signature verification for both providers
- Payload validation
- WebhookEvent recording and redelivery short-circuit
- Completion exactly once under redelivery
- Handler errors answered with 500
"""

import json
from unittest.mock import patch

import pytest

from notifications.models import AdminNotification
from orders.state_machines import OrderStatus
from payments.models import WebhookEvent
from payments.state_machines import PaymentProvider, WebhookEventStatus
from payments.tests.factories import WebhookEventFactory
from payments.webhooks.tests.payloads import sign_stripe, square_payload, stripe_payload


def checkout_completed(order, event_id="evt_test_1"):
    return stripe_payload(
        "checkout.session.completed",
        {
            "id": "cs_test_1",
            "object": "checkout.session",
            "payment_intent": "pi_test_1",
            "metadata": {"order_id": str(order.pk)},
        },
        event_id=event_id,
    )


# =============================================================================
# Stripe: request validation
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookValidation:
    def test_missing_signature_returns_400(self, client):
        response = client.post(
            "/api/v1/payments/webhooks/stripe/",
            data=json.dumps({"id": "evt_1", "type": "ping"}),
            content_type="application/json",
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Missing signature"}

    def test_invalid_signature_returns_400(self, post_stripe, pending_order):
        response = post_stripe(checkout_completed(pending_order), signature="t=1,v1=bad")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid signature"}
        assert not WebhookEvent.objects.exists()

    def test_signature_from_other_secret_returns_400(self, post_stripe, pending_order):
        body = json.dumps(checkout_completed(pending_order)).encode()

        response = post_stripe(body, signature=sign_stripe(body, secret="whsec_other"))

        assert response.status_code == 400

    def test_invalid_json_returns_400(self, post_stripe):
        response = post_stripe(b"{not json")

        assert response.status_code == 400
        assert response.json() == {"error": "Body is not valid JSON"}

    def test_missing_event_id_returns_400(self, post_stripe):
        response = post_stripe({"type": "checkout.session.completed"})

        assert response.status_code == 400

    def test_get_not_allowed(self, client):
        response = client.get("/api/v1/payments/webhooks/stripe/")

        assert response.status_code == 405


# =============================================================================
# Stripe: processing
# =============================================================================


@pytest.mark.django_db
class TestStripeWebhookProcessing:
    def test_checkout_completed(self, post_stripe, patched_dispatcher, pending_order, product):
        response = post_stripe(checkout_completed(pending_order))

        assert response.status_code == 200
        assert response.json() == {"received": True}

        pending_order.refresh_from_db()
        product.refresh_from_db()
        assert pending_order.status == OrderStatus.COMPLETED
        assert pending_order.stock_decremented is True
        assert product.stock == 8
        patched_dispatcher.dispatch.assert_called_once()

        event = WebhookEvent.objects.get(event_id="evt_test_1")
        assert event.provider == PaymentProvider.STRIPE
        assert event.status == WebhookEventStatus.PROCESSED
        assert event.attempts == 1

    def test_duplicate_delivery_short_circuits(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        post_stripe(checkout_completed(pending_order))
        response = post_stripe(checkout_completed(pending_order))

        product.refresh_from_db()
        assert response.status_code == 200
        assert response.json() == {"received": True}
        assert product.stock == 8
        assert patched_dispatcher.dispatch.call_count == 1
        assert WebhookEvent.objects.get(event_id="evt_test_1").attempts == 1

    def test_redelivery_without_audit_row_is_harmless(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        post_stripe(checkout_completed(pending_order))
        WebhookEvent.objects.all().delete()

        response = post_stripe(checkout_completed(pending_order))

        product.refresh_from_db()
        assert response.status_code == 200
        assert product.stock == 8
        assert patched_dispatcher.dispatch.call_count == 1

    def test_session_and_intent_events_complete_once(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        post_stripe(checkout_completed(pending_order))
        post_stripe(
            stripe_payload(
                "payment_intent.succeeded",
                {"id": "pi_test_1", "metadata": {"order_id": str(pending_order.pk)}},
                event_id="evt_test_2",
            )
        )

        product.refresh_from_db()
        assert product.stock == 8
        assert patched_dispatcher.dispatch.call_count == 1
        assert WebhookEvent.objects.filter(status=WebhookEventStatus.PROCESSED).count() == 2

    def test_payment_failed(self, post_stripe, patched_dispatcher, pending_order, product):
        response = post_stripe(
            stripe_payload(
                "payment_intent.payment_failed",
                {
                    "id": "pi_test_1",
                    "metadata": {"order_id": str(pending_order.pk)},
                    "last_payment_error": {"message": "Your card was declined."},
                },
            )
        )

        pending_order.refresh_from_db()
        product.refresh_from_db()
        assert response.status_code == 200
        assert pending_order.status == OrderStatus.CANCELLED
        assert product.stock == 10
        notification = AdminNotification.objects.get()
        assert notification.reference_id == str(pending_order.pk)
        assert "Your card was declined." in notification.message

    def test_late_payment_failed_keeps_completed_order(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        post_stripe(checkout_completed(pending_order))
        response = post_stripe(
            stripe_payload(
                "payment_intent.payment_failed",
                {
                    "id": "pi_test_0",
                    "metadata": {"order_id": str(pending_order.pk)},
                    "last_payment_error": {"message": "Your card was declined."},
                },
                event_id="evt_test_2",
            )
        )

        pending_order.refresh_from_db()
        product.refresh_from_db()
        assert response.status_code == 200
        assert pending_order.status == OrderStatus.COMPLETED
        assert pending_order.cancelled_at is None
        assert product.stock == 8
        assert not AdminNotification.objects.exists()

    def test_uncorrelated_event_acknowledged(self, post_stripe, patched_dispatcher):
        response = post_stripe(
            stripe_payload("checkout.session.completed", {"id": "cs_test_1", "metadata": {}})
        )

        event = WebhookEvent.objects.get()
        assert response.status_code == 200
        assert event.status == WebhookEventStatus.PROCESSED
        assert "could not be correlated" in event.error_message

    def test_unknown_event_type_acknowledged(self, post_stripe, patched_dispatcher):
        response = post_stripe(stripe_payload("customer.created", {"id": "cus_1"}))

        assert response.status_code == 200
        assert WebhookEvent.objects.get().status == WebhookEventStatus.PROCESSED

    def test_handler_error_returns_500(self, post_stripe, patched_dispatcher, pending_order):
        with patch(
            "payments.webhooks.views.dispatch_webhook",
            side_effect=RuntimeError("database went away"),
        ):
            response = post_stripe(checkout_completed(pending_order))

        event = WebhookEvent.objects.get()
        assert response.status_code == 500
        assert response.json() == {"error": "Webhook handler failed"}
        assert event.status == WebhookEventStatus.FAILED
        assert event.error_message == "RuntimeError: database went away"

    def test_redelivery_after_failure_is_processed(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        with patch("payments.webhooks.views.dispatch_webhook", side_effect=RuntimeError("boom")):
            post_stripe(checkout_completed(pending_order))

        response = post_stripe(checkout_completed(pending_order))

        event = WebhookEvent.objects.get()
        product.refresh_from_db()
        assert response.status_code == 200
        assert event.status == WebhookEventStatus.PROCESSED
        assert event.attempts == 2
        assert product.stock == 8

    def test_redelivery_of_stuck_event_is_processed(
        self, post_stripe, patched_dispatcher, pending_order, product
    ):
        WebhookEventFactory(
            event_id="evt_test_1",
            status=WebhookEventStatus.PROCESSING,
            attempts=1,
        )

        response = post_stripe(checkout_completed(pending_order))

        event = WebhookEvent.objects.get()
        product.refresh_from_db()
        assert response.status_code == 200
        assert event.status == WebhookEventStatus.PROCESSED
        assert event.attempts == 2
        assert product.stock == 8


# =============================================================================
# Square
# =============================================================================


@pytest.mark.django_db
class TestSquareWebhook:
    def test_missing_signature_returns_400(self, client):
        response = client.post(
            "/api/v1/payments/webhooks/square/",
            data=json.dumps({"event_id": "sq-1", "type": "payment.updated"}),
            content_type="application/json",
        )

        assert response.status_code == 400

    def test_invalid_signature_returns_400(self, post_square):
        response = post_square(
            square_payload("payment.updated", {"id": "PAY_1"}), signature="bm90LWEtc2lnbmF0dXJl"
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid signature"}

    def test_payment_created_then_completed(
        self, post_square, patched_dispatcher, square_order, product
    ):
        post_square(
            square_payload(
                "payment.created",
                {"id": "PAY_1", "status": "APPROVED", "order_id": "SQ_ORDER_1"},
                event_id="sq-evt-1",
            )
        )
        square_order.refresh_from_db()
        assert square_order.status == OrderStatus.PROCESSING

        response = post_square(
            square_payload(
                "payment.updated",
                {"id": "PAY_1", "status": "COMPLETED", "order_id": "SQ_ORDER_1"},
                event_id="sq-evt-2",
            )
        )

        square_order.refresh_from_db()
        product.refresh_from_db()
        assert response.status_code == 200
        assert square_order.status == OrderStatus.COMPLETED
        assert square_order.square_payment_id == "PAY_1"
        assert product.stock == 7
        patched_dispatcher.dispatch.assert_called_once()

    def test_reference_id_correlation(self, post_square, patched_dispatcher, square_order):
        post_square(
            square_payload(
                "payment.updated",
                {"id": "PAY_1", "status": "COMPLETED", "reference_id": str(square_order.pk)},
            )
        )

        square_order.refresh_from_db()
        assert square_order.status == OrderStatus.COMPLETED

    def test_foreign_reference_id_correlates_by_square_order(
        self, post_square, patched_dispatcher, square_order, product
    ):
        response = post_square(
            square_payload(
                "payment.updated",
                {
                    "id": "PAY_1",
                    "status": "COMPLETED",
                    "reference_id": "POS-REF-42",
                    "order_id": "SQ_ORDER_1",
                },
            )
        )

        square_order.refresh_from_db()
        product.refresh_from_db()
        assert response.status_code == 200
        assert square_order.status == OrderStatus.COMPLETED
        assert product.stock == 7
        assert WebhookEvent.objects.get().error_message is None

    def test_failed_payment_cancels(self, post_square, patched_dispatcher, square_order):
        post_square(
            square_payload(
                "payment.updated",
                {"id": "PAY_1", "status": "FAILED", "order_id": "SQ_ORDER_1"},
            )
        )

        square_order.refresh_from_db()
        assert square_order.status == OrderStatus.CANCELLED

    def test_catalog_update_queues_sync(self, post_square, patched_dispatcher):
        payload = {"event_id": "sq-cat-1", "type": "catalog.version.updated", "data": {}}

        with patch("payments.webhooks.handlers.sync_square_catalog_task.delay") as mock_delay:
            mock_delay.return_value.id = "task-1"
            response = post_square(payload)

        assert response.status_code == 200
        mock_delay.assert_called_once_with()
        assert WebhookEvent.objects.get().provider == PaymentProvider.SQUARE
