"""
Test configuration and fixtures for notification tests.

Usage:
    def test_example(staff_client, unread_notification):
        response = staff_client.get("/api/v1/notifications/admin/")
        assert response.status_code == 200
"""

from unittest.mock import MagicMock

import pytest

from catalog.tests.factories import ProductFactory
from notifications.dispatcher import DispatcherConfig, SideEffectDispatcher
from notifications.tests.factories import AdminNotificationFactory
from orders.models import Order
from orders.state_machines import OrderStatus
from orders.tests.factories import OrderFactory, OrderItemFactory


# =============================================================================
# Notification Fixtures
# =============================================================================


@pytest.fixture
def unread_notification(db):
    return AdminNotificationFactory()


@pytest.fixture
def read_notification(db):
    return AdminNotificationFactory(is_read=True)


# =============================================================================
# Dispatcher Fixtures
# =============================================================================


@pytest.fixture
def discord():
    """DiscordClient stand-in with a bot token configured."""
    client = MagicMock()
    client.is_configured = True
    client.create_text_channel.return_value = {"id": "channel-1"}
    return client


@pytest.fixture
def dispatcher_config():
    return DispatcherConfig(
        guild_id="guild-1",
        owner_id="owner-1",
        ticket_category_id="category-1",
        customer_role_id="role-1",
        announcement_webhook_url="https://discord.test/api/webhooks/1/abc",
        store_name="Test Store",
    )


@pytest.fixture
def side_effect_dispatcher(discord, dispatcher_config):
    return SideEffectDispatcher(discord=discord, config=dispatcher_config)


@pytest.fixture
def completed_order(db, user):
    """Completed order for 2 x Netherite Sword and 1 x Totem ($14.00)."""
    order = OrderFactory(
        user=user,
        total_cents=1400,
        status=OrderStatus.COMPLETED,
        stock_decremented=True,
    )
    OrderItemFactory(
        order=order,
        product=ProductFactory(title="Netherite Sword", price_cents=500),
        quantity=2,
    )
    OrderItemFactory(
        order=order,
        product=ProductFactory(title="Totem", price_cents=400),
        quantity=1,
    )
    return Order.objects.with_items().get(pk=order.pk)
