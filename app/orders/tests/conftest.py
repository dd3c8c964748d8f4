"""
Pytest fixtures for order tests.
"""

from unittest.mock import MagicMock

import pytest

from catalog.tests.factories import ProductFactory
from orders.tests.factories import OrderFactory, OrderItemFactory


@pytest.fixture
def product(db):
    return ProductFactory(title="Netherite Sword", price_cents=500, stock=10)


@pytest.fixture
def pending_order(db, user, product):
    """Pending order for 2 x product ($10.00)."""
    order = OrderFactory(user=user, total_cents=1000)
    OrderItemFactory(order=order, product=product, quantity=2)
    return order


@pytest.fixture
def dispatcher():
    """Stand-in SideEffectDispatcher that records dispatched orders."""
    mock = MagicMock()
    mock.dispatch.return_value = []
    return mock
