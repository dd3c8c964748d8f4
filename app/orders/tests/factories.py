"""
Factory Boy factories for order test data.

Usage:
    from orders.tests.factories import OrderFactory, OrderItemFactory

    order = OrderFactory(status=OrderStatus.COMPLETED, stock_decremented=True)
    OrderItemFactory(order=order, product=product, quantity=2)
"""

import factory

from authentication.tests.factories import UserFactory
from catalog.tests.factories import ProductFactory
from orders.models import Order, OrderItem
from orders.state_machines import OrderStatus
from payments.state_machines import PaymentProvider


class OrderFactory(factory.django.DjangoModelFactory):
    """Pending Stripe order with no items; add items with OrderItemFactory."""

    class Meta:
        model = Order

    user = factory.SubFactory(UserFactory)
    minecraft_username = factory.LazyAttribute(
        lambda o: o.user.minecraft_username if o.user else "Steve"
    )
    discord_id = factory.LazyAttribute(lambda o: o.user.discord_id if o.user else "")
    total_cents = 1000
    currency = "usd"
    status = OrderStatus.PENDING
    stock_decremented = False
    provider = PaymentProvider.STRIPE


class OrderItemFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = OrderItem

    order = factory.SubFactory(OrderFactory)
    product = factory.SubFactory(ProductFactory)
    quantity = 1
    unit_price_cents = factory.LazyAttribute(lambda o: o.product.price_cents)
    title = factory.LazyAttribute(lambda o: o.product.title)
