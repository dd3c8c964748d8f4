"""
Tests for order models.
"""

import pytest
from django.db import IntegrityError

from orders.models import Order
from orders.state_machines import OrderStatus
from orders.tests.factories import OrderFactory, OrderItemFactory


@pytest.mark.django_db
class TestOrder:
    def test_defaults(self):
        order = OrderFactory()

        assert order.status == OrderStatus.PENDING
        assert order.stock_decremented is False

    def test_short_id(self):
        order = OrderFactory()

        assert order.short_id == str(order.id)[:8].upper()
        assert str(order) == f"Order #{order.short_id} (pending)"

    def test_for_user(self, user):
        mine = OrderFactory(user=user)
        OrderFactory()

        assert list(Order.objects.for_user(user)) == [mine]

    def test_deleting_user_keeps_order(self, user):
        order = OrderFactory(user=user)

        user.delete()

        order.refresh_from_db()
        assert order.user is None


@pytest.mark.django_db
class TestOrderItem:
    def test_line_total(self):
        item = OrderItemFactory(quantity=3, unit_price_cents=250)

        assert item.line_total_cents == 750

    def test_quantity_must_be_positive(self):
        with pytest.raises(IntegrityError):
            OrderItemFactory(quantity=0)
