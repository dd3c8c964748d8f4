"""
Pytest fixtures for webhook tests.

Sections:
    - Order Fixtures
    - Signed Delivery Helpers
"""

import json
from unittest.mock import MagicMock, patch

import pytest
from django.test import override_settings

from catalog.tests.factories import ProductFactory
from orders.tests.factories import OrderFactory, OrderItemFactory
from payments.signatures import compute_square_signature
from payments.state_machines import PaymentProvider
from payments.webhooks.tests.payloads import SQUARE_KEY, SQUARE_URL, STRIPE_SECRET, sign_stripe


# =============================================================================
# Order Fixtures
# =============================================================================


@pytest.fixture
def product(db):
    return ProductFactory(title="Netherite Sword", price_cents=500, stock=10)


@pytest.fixture
def pending_order(db, user, product):
    """Pending Stripe order for 2 x product."""
    order = OrderFactory(user=user, total_cents=1000)
    OrderItemFactory(order=order, product=product, quantity=2)
    return order


@pytest.fixture
def square_order(db, user, product):
    """Pending Square order for 3 x product."""
    order = OrderFactory(
        user=user,
        total_cents=1500,
        provider=PaymentProvider.SQUARE,
        square_order_id="SQ_ORDER_1",
    )
    OrderItemFactory(order=order, product=product, quantity=3)
    return order


@pytest.fixture
def dispatcher():
    mock = MagicMock()
    mock.dispatch.return_value = []
    return mock


@pytest.fixture
def patched_dispatcher(dispatcher):
    """Make the webhook views use the ``dispatcher`` mock."""
    with patch(
        "payments.webhooks.views.SideEffectDispatcher.from_settings",
        return_value=dispatcher,
    ):
        yield dispatcher


# =============================================================================
# Signed Delivery Helpers
# =============================================================================


@pytest.fixture
def post_stripe(client):
    """POST a Stripe event with a valid signature."""

    def post(payload, signature=None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        with override_settings(STRIPE_WEBHOOK_SECRET=STRIPE_SECRET):
            return client.post(
                "/api/v1/payments/webhooks/stripe/",
                data=body,
                content_type="application/json",
                HTTP_STRIPE_SIGNATURE=sign_stripe(body) if signature is None else signature,
            )

    return post


@pytest.fixture
def post_square(client):
    """POST a Square event with a valid signature."""

    def post(payload, signature=None):
        body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
        if signature is None:
            signature = compute_square_signature(body, SQUARE_KEY, SQUARE_URL)
        with override_settings(
            SQUARE_WEBHOOK_SIGNATURE_KEY=SQUARE_KEY, SQUARE_WEBHOOK_URL=SQUARE_URL
        ):
            return client.post(
                "/api/v1/payments/webhooks/square/",
                data=body,
                content_type="application/json",
                HTTP_X_SQUARE_SIGNATURE=signature,
            )

    return post
