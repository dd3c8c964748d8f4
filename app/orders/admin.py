"""
Django admin configuration for order models.
"""

from django.contrib import admin, messages

from orders.models import Order, OrderItem
from orders.services import OrderLifecycleService
from orders.state_machines import OrderStatus


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    can_delete = False
    readonly_fields = ["product", "title", "quantity", "unit_price_cents"]

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    """Admin configuration for Order model."""

    list_display = [
        "short_id",
        "user",
        "minecraft_username",
        "total_cents",
        "status",
        "provider",
        "stock_decremented",
        "created_at",
    ]
    list_filter = ["status", "provider", "stock_decremented"]
    search_fields = [
        "id",
        "minecraft_username",
        "discord_id",
        "stripe_session_id",
        "square_order_id",
    ]
    readonly_fields = [
        "id",
        "user",
        "total_cents",
        "currency",
        "status",
        "stock_decremented",
        "provider",
        "stripe_session_id",
        "stripe_payment_intent_id",
        "square_payment_link_id",
        "square_order_id",
        "square_payment_id",
        "completed_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    inlines = [OrderItemInline]
    actions = ["refund_orders", "cancel_orders"]

    @admin.action(description="Mark selected completed orders as refunded")
    def refund_orders(self, request, queryset):
        refunded = 0
        for order in queryset.filter(status=OrderStatus.COMPLETED):
            OrderLifecycleService.refund(order, actor=request.user)
            refunded += 1
        self.message_user(request, f"{refunded} order(s) refunded.", messages.SUCCESS)

    @admin.action(description="Cancel selected orders")
    def cancel_orders(self, request, queryset):
        for order in queryset:
            OrderLifecycleService.override_status(
                order, OrderStatus.CANCELLED, actor=request.user
            )
        self.message_user(request, f"{queryset.count()} order(s) cancelled.")
