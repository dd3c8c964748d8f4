"""
End-to-end purchase journeys: checkout, provider webhook, side effects.

Only the provider and Discord HTTP calls are replaced; everything between
the checkout endpoint and the receipt email runs for real.
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from django.core import mail
from django.test import override_settings
from django.urls import reverse

from notifications.dispatcher import DispatcherConfig, SideEffectDispatcher
from notifications.models import AdminNotification, AdminNotificationType
from orders.models import Order
from orders.state_machines import OrderStatus
from payments.adapters import CheckoutSessionResult, PaymentLinkResult
from payments.signatures import compute_square_signature
from payments.webhooks.tests.payloads import (
    SQUARE_KEY,
    SQUARE_URL,
    STRIPE_SECRET,
    sign_stripe,
    square_payload,
    stripe_payload,
)


@pytest.fixture
def discord():
    client = MagicMock()
    client.is_configured = True
    client.create_text_channel.return_value = {"id": "ticket-channel"}
    return client


@pytest.fixture
def live_dispatcher(discord):
    dispatcher = SideEffectDispatcher(
        discord=discord,
        config=DispatcherConfig(
            guild_id="guild-1",
            owner_id="owner-1",
            customer_role_id="role-1",
            announcement_webhook_url="https://discord.test/api/webhooks/1/abc",
        ),
    )
    with patch(
        "payments.webhooks.views.SideEffectDispatcher.from_settings",
        return_value=dispatcher,
    ):
        yield dispatcher


def checkout(client, url, product, quantity):
    return client.post(
        url,
        {
            "items": [{"product_id": str(product.id), "quantity": quantity}],
            "minecraft_username": "Steve",
            "success_url": "https://shop.example.com/success",
            "cancel_url": "https://shop.example.com/cart",
        },
        format="json",
    )


@pytest.mark.django_db
@override_settings(STRIPE_WEBHOOK_SECRET=STRIPE_SECRET)
def test_stripe_purchase(authenticated_client, client, user, product, discord, live_dispatcher):
    with patch(
        "orders.services.StripeAdapter.create_checkout_session",
        return_value=CheckoutSessionResult(id="cs_live_1", url="https://checkout.stripe.com/c/1"),
    ):
        response = checkout(authenticated_client, reverse("orders:checkout-stripe"), product, 3)

    order_id = response.data["order_id"]
    order = Order.objects.get(pk=order_id)
    assert order.status == OrderStatus.PENDING
    assert order.stripe_session_id == "cs_live_1"

    body = json.dumps(
        stripe_payload(
            "checkout.session.completed",
            {"id": "cs_live_1", "payment_intent": "pi_live_1", "metadata": {"order_id": order_id}},
        )
    ).encode()
    for _ in range(2):
        response = client.post(
            "/api/v1/payments/webhooks/stripe/",
            data=body,
            content_type="application/json",
            HTTP_STRIPE_SIGNATURE=sign_stripe(body),
        )
        assert response.status_code == 200

    order.refresh_from_db()
    product.refresh_from_db()
    assert order.status == OrderStatus.COMPLETED
    assert order.stripe_payment_intent_id == "pi_live_1"
    assert product.stock == 7

    assert AdminNotification.objects.filter(
        type=AdminNotificationType.NEW_ORDER, reference_id=order_id
    ).count() == 1
    discord.create_text_channel.assert_called_once()
    discord.add_member_role.assert_called_once_with("guild-1", user.discord_id, "role-1")
    discord.execute_webhook.assert_called_once()
    assert len(mail.outbox) == 1
    assert mail.outbox[0].to == [user.email]


@pytest.mark.django_db
@override_settings(SQUARE_WEBHOOK_SIGNATURE_KEY=SQUARE_KEY, SQUARE_WEBHOOK_URL=SQUARE_URL)
def test_square_purchase(authenticated_client, client, product, live_dispatcher):
    with patch(
        "orders.services.SquareAdapter.create_payment_link",
        return_value=PaymentLinkResult(
            id="LINK_1", url="https://square.link/u/abc", order_id="SQ_ORDER_9"
        ),
    ):
        response = checkout(authenticated_client, reverse("orders:checkout-square"), product, 2)

    order = Order.objects.get(pk=response.data["order_id"])
    assert order.square_order_id == "SQ_ORDER_9"

    def deliver(event_type, status, event_id):
        body = json.dumps(
            square_payload(
                event_type,
                {"id": "PAY_9", "status": status, "order_id": "SQ_ORDER_9"},
                event_id=event_id,
            )
        ).encode()
        return client.post(
            "/api/v1/payments/webhooks/square/",
            data=body,
            content_type="application/json",
            HTTP_X_SQUARE_SIGNATURE=compute_square_signature(body, SQUARE_KEY, SQUARE_URL),
        )

    assert deliver("payment.created", "APPROVED", "sq-1").status_code == 200
    order.refresh_from_db()
    assert order.status == OrderStatus.PROCESSING

    assert deliver("payment.updated", "COMPLETED", "sq-2").status_code == 200
    assert deliver("payment.updated", "COMPLETED", "sq-3").status_code == 200

    order.refresh_from_db()
    product.refresh_from_db()
    assert order.status == OrderStatus.COMPLETED
    assert order.square_payment_id == "PAY_9"
    assert product.stock == 8
    assert len(mail.outbox) == 1
