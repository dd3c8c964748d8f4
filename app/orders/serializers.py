"""
Serializers for order endpoints.
"""

from rest_framework import serializers

from orders.models import Order, OrderItem
from orders.state_machines import OrderStatus


class CartItemSerializer(serializers.Serializer):
    product_id = serializers.UUIDField()
    quantity = serializers.IntegerField(min_value=1)


class CheckoutRequestSerializer(serializers.Serializer):
    """
    Checkout request body.

    Only product ids and quantities are accepted; prices come from the
    database.
    """

    items = CartItemSerializer(many=True, allow_empty=True)
    minecraft_username = serializers.RegexField(
        r"^[A-Za-z0-9_]{3,16}$",
        error_messages={"invalid": "Enter a valid Minecraft username."},
    )
    success_url = serializers.URLField()
    cancel_url = serializers.URLField()


class CheckoutResponseSerializer(serializers.Serializer):
    url = serializers.URLField()
    order_id = serializers.UUIDField()


class OrderItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderItem
        fields = ["product", "title", "quantity", "unit_price_cents"]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    """Order as the buyer sees it."""

    items = OrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "status",
            "minecraft_username",
            "total_cents",
            "currency",
            "provider",
            "items",
            "created_at",
            "completed_at",
        ]
        read_only_fields = fields


class AdminOrderSerializer(OrderSerializer):
    """Order with provider references and buyer details."""

    discord_username = serializers.CharField(
        source="user.discord_username", default=None, read_only=True
    )

    class Meta(OrderSerializer.Meta):
        fields = OrderSerializer.Meta.fields + [
            "user",
            "discord_id",
            "discord_username",
            "stock_decremented",
            "stripe_session_id",
            "stripe_payment_intent_id",
            "square_payment_link_id",
            "square_order_id",
            "square_payment_id",
            "notes",
            "cancelled_at",
            "updated_at",
        ]
        read_only_fields = fields


class OrderStatusUpdateSerializer(serializers.Serializer):
    """
    Administrative status change.

    ``refunded`` goes through the guarded refund transition; every other
    value is a plain override.
    """

    status = serializers.ChoiceField(choices=OrderStatus.choices)
