"""
Order models.

An Order is created in PENDING state at checkout, before the buyer is sent
to Stripe or Square. Its outcome arrives later through payment webhooks.

The ``stock_decremented`` flag is the exactly-once guard for completion: it
flips false→true in the same UPDATE that sets status=completed, and is never
reset. See orders.services.OrderLifecycleService.complete.
"""

from __future__ import annotations


from django.conf import settings
from django.db import models
from django_fsm import FSMField, transition

from core.model_mixins import UUIDPrimaryKeyMixin
from core.models import BaseModel
from orders.state_machines import OrderStatus
from payments.state_machines import PaymentProvider


class OrderQuerySet(models.QuerySet):
    def for_user(self, user):
        return self.filter(user=user)

    def with_items(self):
        return self.select_related("user").prefetch_related("items")


class Order(UUIDPrimaryKeyMixin, BaseModel):
    """
    A purchase attempt.

    Fields:
        user: Buyer (kept nullable so deleting a user keeps order history)
        minecraft_username: In-game account the items are delivered to
        discord_id: Buyer's Discord id at checkout time
        total_cents: Sum of item lines, computed server-side
        currency: ISO currency code
        status: Lifecycle state (django-fsm)
        stock_decremented: Completion guard, see module docstring
        provider: Which provider the buyer was sent to
        stripe_* / square_*: Provider references used for correlation
        completed_at / cancelled_at: Transition timestamps

    State Transitions:
        mark_processing: PENDING → PROCESSING
        refund: COMPLETED → REFUNDED

    Completion and cancellation are conditional queryset updates in
    OrderLifecycleService, not FSM transitions, so they stay atomic under
    concurrent webhook deliveries.
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="orders",
    )
    minecraft_username = models.CharField(max_length=16)
    discord_id = models.CharField(max_length=32, blank=True, default="")

    total_cents = models.PositiveIntegerField(help_text="Order total in cents")
    currency = models.CharField(max_length=3, default="usd")

    # protected=False: the guard writes status through queryset updates and
    # refresh_from_db must be able to reload it
    status = FSMField(
        default=OrderStatus.PENDING,
        choices=OrderStatus.choices,
        db_index=True,
        protected=False,
    )
    stock_decremented = models.BooleanField(default=False)

    provider = models.CharField(
        max_length=20,
        choices=PaymentProvider.choices,
        blank=True,
        default="",
    )
    stripe_session_id = models.CharField(
        max_length=255, blank=True, null=True, unique=True
    )
    stripe_payment_intent_id = models.CharField(max_length=255, blank=True, null=True)
    square_payment_link_id = models.CharField(max_length=255, blank=True, null=True)
    square_order_id = models.CharField(
        max_length=255, blank=True, null=True, unique=True
    )
    square_payment_id = models.CharField(max_length=255, blank=True, null=True)

    notes = models.TextField(blank=True, default="")

    completed_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    objects = OrderQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["user", "-created_at"], name="order_user_created_idx"),
        ]

    def __str__(self) -> str:
        return f"Order #{self.short_id} ({self.status})"

    @property
    def short_id(self) -> str:
        """First 8 characters of the id, upper-cased (what buyers see)."""
        return str(self.id)[:8].upper()

    # ==========================================================================
    # State Transitions
    # ==========================================================================

    @transition(
        field=status,
        source=OrderStatus.PENDING,
        target=OrderStatus.PROCESSING,
    )
    def mark_processing(self):
        """Provider reported a payment attempt in progress."""

    @transition(
        field=status,
        source=OrderStatus.COMPLETED,
        target=OrderStatus.REFUNDED,
    )
    def refund(self):
        """Administrator refunded the order. Stock is not returned."""


class OrderItem(models.Model):
    """
    One line of an order.

    ``unit_price_cents`` and ``title`` are snapshots taken at checkout so
    later catalog edits never change what the buyer paid for. Rows are never
    updated after insert.
    """

    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name="items")
    product = models.ForeignKey(
        "catalog.Product",
        on_delete=models.PROTECT,
        related_name="order_items",
    )
    quantity = models.PositiveIntegerField()
    unit_price_cents = models.PositiveIntegerField()
    title = models.CharField(max_length=255)

    class Meta:
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gt=0),
                name="order_item_quantity_positive",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.quantity}x {self.title}"

    @property
    def line_total_cents(self) -> int:
        return self.unit_price_cents * self.quantity
