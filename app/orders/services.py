"""
Order services.

CheckoutService:
    Validates a cart against the database, writes the pending order and
    hands the buyer to Stripe or Square. Client-supplied prices are never
    used.

OrderLifecycleService:
    Applies payment outcomes to orders. Completion is guarded by a single
    conditional UPDATE so that however many times (and however
    concurrently) a success webhook is delivered, stock is decremented and
    side effects fire exactly once.

Usage:
    from orders.services import CheckoutService, OrderLifecycleService

    checkout = CheckoutService.start_stripe_checkout(
        user=request.user,
        items=[{"product_id": product.id, "quantity": 2}],
        minecraft_username="Steve",
        success_url="https://store.example/success",
        cancel_url="https://store.example/cart",
    )

    result = OrderLifecycleService.complete(
        order_id,
        provider=PaymentProvider.STRIPE,
        dispatcher=SideEffectDispatcher.from_settings(),
    )
    if result.success and result.data.first_completion:
        ...
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone
from django_fsm import can_proceed

from catalog.models import Product
from catalog.services import StockLedger
from core.services import BaseService, ServiceResult
from notifications.models import AdminNotificationType
from notifications.services import AdminNotificationService
from orders.exceptions import CheckoutValidationError
from orders.models import Order, OrderItem
from orders.state_machines import OrderStatus
from payments.adapters import SquareAdapter, StripeAdapter
from payments.adapters.square_adapter import CreatePaymentLinkParams, SquareLineItem
from payments.adapters.stripe_adapter import CreateCheckoutSessionParams
from payments.events import Outcome
from payments.exceptions import InvalidStateTransitionError, PaymentProcessingError
from payments.state_machines import PaymentProvider

if TYPE_CHECKING:
    from typing import Any

    from authentication.models import User
    from notifications.dispatcher import SideEffectDispatcher, SideEffectResult
    from payments.events import PaymentOutcome


def _format_dollars(cents: int) -> str:
    return f"${cents / 100:.2f}"


def _with_order_id(url: str, order_id) -> str:
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}order_id={order_id}"


def _coerce_order_id(order_id) -> uuid.UUID | None:
    if isinstance(order_id, uuid.UUID):
        return order_id
    try:
        return uuid.UUID(str(order_id))
    except (TypeError, ValueError):
        return None


# =============================================================================
# Checkout
# =============================================================================


@dataclass
class CartLine:
    """A validated cart line priced from the database."""

    product: Product
    quantity: int

    @property
    def unit_price_cents(self) -> int:
        return self.product.price_cents

    @property
    def line_total_cents(self) -> int:
        return self.product.price_cents * self.quantity


@dataclass
class CheckoutResult:
    """Where to send the buyer, and the order waiting for the webhook."""

    order: Order
    url: str

    def to_response(self) -> dict[str, str]:
        return {"url": self.url, "order_id": str(self.order.id)}


class CheckoutService(BaseService):
    """
    Cart validation and provider session creation.

    Every ``start_*`` method either returns a CheckoutResult or raises:
        CheckoutValidationError: Cart rejected, nothing written
        PaymentProcessingError: Provider call failed, pending order deleted
    """

    @classmethod
    def validate_cart(cls, items: list[dict[str, Any]]) -> list[CartLine]:
        """
        Price a cart from the database.

        Repeated product ids are merged before the stock check.

        Raises:
            CheckoutValidationError: Empty cart, unknown or inactive product,
                insufficient stock, or total below the store minimum
        """
        if not items:
            raise CheckoutValidationError(
                "Cart is empty",
                error_code=CheckoutValidationError.EMPTY_CART,
            )

        quantities: dict[str, int] = {}
        for item in items:
            key = str(item["product_id"])
            quantities[key] = quantities.get(key, 0) + int(item["quantity"])

        products = Product.objects.in_bulk(list(quantities))
        products = {str(pk): product for pk, product in products.items()}

        lines: list[CartLine] = []
        for product_id, quantity in quantities.items():
            product = products.get(product_id)
            if product is None:
                raise CheckoutValidationError(
                    f"Product not found: {product_id}",
                    error_code=CheckoutValidationError.PRODUCT_NOT_FOUND,
                    details={"product_id": product_id},
                )
            if not product.is_active:
                raise CheckoutValidationError(
                    f"Product is not available: {product.title}",
                    error_code=CheckoutValidationError.PRODUCT_INACTIVE,
                    details={"product_id": product_id},
                )
            if product.stock < quantity:
                raise CheckoutValidationError(
                    f"Insufficient stock for {product.title} "
                    f"(requested: {quantity}, available: {product.stock})",
                    error_code=CheckoutValidationError.INSUFFICIENT_STOCK,
                    details={
                        "product_id": product_id,
                        "requested": quantity,
                        "available": product.stock,
                    },
                )
            lines.append(CartLine(product=product, quantity=quantity))

        total_cents = sum(line.line_total_cents for line in lines)
        minimum_cents = settings.STORE_MINIMUM_ORDER_CENTS
        if total_cents < minimum_cents:
            raise CheckoutValidationError(
                f"Minimum order amount is {_format_dollars(minimum_cents)}. "
                f"Your cart total is {_format_dollars(total_cents)}",
                error_code=CheckoutValidationError.BELOW_MINIMUM_ORDER,
                details={"total_cents": total_cents, "minimum_cents": minimum_cents},
            )

        return lines

    @classmethod
    def create_pending_order(
        cls,
        user: User,
        lines: list[CartLine],
        minecraft_username: str,
        provider: str,
    ) -> Order:
        """Write the order and its item snapshots in one transaction."""
        with cls.atomic():
            order = Order.objects.create(
                user=user,
                minecraft_username=minecraft_username,
                discord_id=user.discord_id or "",
                total_cents=sum(line.line_total_cents for line in lines),
                currency=settings.STORE_CURRENCY,
                provider=provider,
            )
            OrderItem.objects.bulk_create(
                [
                    OrderItem(
                        order=order,
                        product=line.product,
                        quantity=line.quantity,
                        unit_price_cents=line.unit_price_cents,
                        title=line.product.title,
                    )
                    for line in lines
                ]
            )

        cls.get_logger().info(
            "Pending order created",
            extra={
                "order_id": str(order.id),
                "provider": provider,
                "total_cents": order.total_cents,
                "lines": len(lines),
            },
        )
        return order

    @classmethod
    def start_stripe_checkout(
        cls,
        user: User,
        items: list[dict[str, Any]],
        minecraft_username: str,
        success_url: str,
        cancel_url: str,
    ) -> CheckoutResult:
        """Validate, create the pending order, then a Stripe Checkout Session."""
        lines = cls.validate_cart(items)
        order = cls.create_pending_order(
            user, lines, minecraft_username, PaymentProvider.STRIPE
        )

        line_items = []
        for line in lines:
            if line.product.stripe_price_id:
                line_items.append(
                    {"price": line.product.stripe_price_id, "quantity": line.quantity}
                )
            else:
                line_items.append(
                    {
                        "price_data": {
                            "currency": order.currency,
                            "product_data": {"name": line.product.title},
                            "unit_amount": line.unit_price_cents,
                        },
                        "quantity": line.quantity,
                    }
                )

        try:
            session = StripeAdapter.create_checkout_session(
                CreateCheckoutSessionParams(
                    line_items=line_items,
                    success_url=_with_order_id(success_url, order.id),
                    cancel_url=cancel_url,
                    idempotency_key=f"checkout:{order.id}",
                    metadata={
                        "order_id": str(order.id),
                        "user_id": str(user.pk),
                        "minecraft_username": minecraft_username,
                    },
                    customer_email=user.email,
                )
            )
        except PaymentProcessingError:
            cls._discard(order)
            raise

        Order.objects.filter(pk=order.pk).update(
            stripe_session_id=session.id,
            updated_at=timezone.now(),
        )
        order.stripe_session_id = session.id

        return CheckoutResult(order=order, url=session.url)

    @classmethod
    def start_square_checkout(
        cls,
        user: User,
        items: list[dict[str, Any]],
        minecraft_username: str,
        success_url: str,
        cancel_url: str | None = None,
    ) -> CheckoutResult:
        """
        Validate, create the pending order, then a Square payment link.

        The order id travels as the Square order's ``reference_id``; the
        payment note is informational only.
        """
        lines = cls.validate_cart(items)
        order = cls.create_pending_order(
            user, lines, minecraft_username, PaymentProvider.SQUARE
        )

        summary = ", ".join(f"{line.product.title} x{line.quantity}" for line in lines)

        try:
            link = SquareAdapter.create_payment_link(
                CreatePaymentLinkParams(
                    reference_id=str(order.id),
                    idempotency_key=str(order.id),
                    line_items=[
                        SquareLineItem(
                            name=line.product.title,
                            quantity=line.quantity,
                            amount_cents=line.unit_price_cents,
                            currency=order.currency,
                        )
                        for line in lines
                    ],
                    redirect_url=_with_order_id(success_url, order.id),
                    buyer_email=user.email,
                    payment_note=(
                        f"Order: {order.id} | Minecraft: {minecraft_username} "
                        f"| Items: {summary}"
                    ),
                )
            )
        except PaymentProcessingError:
            cls._discard(order)
            raise

        Order.objects.filter(pk=order.pk).update(
            square_payment_link_id=link.id,
            square_order_id=link.order_id,
            updated_at=timezone.now(),
        )
        order.square_payment_link_id = link.id
        order.square_order_id = link.order_id

        return CheckoutResult(order=order, url=link.url)

    @classmethod
    def _discard(cls, order: Order) -> None:
        # Never reached the provider, so no webhook will ever refer to it
        order_id = str(order.id)
        order.delete()
        cls.get_logger().warning(
            "Pending order discarded after provider failure",
            extra={"order_id": order_id, "provider": order.provider},
        )


# =============================================================================
# Lifecycle
# =============================================================================


@dataclass
class CompletionResult:
    """
    Outcome of a completion attempt.

    Attributes:
        order_id: The order
        first_completion: True only for the delivery that won the guard
        side_effects: Dispatcher results (empty unless first_completion)
    """

    order_id: uuid.UUID
    first_completion: bool
    side_effects: list[SideEffectResult] = field(default_factory=list)


class OrderLifecycleService(BaseService):
    """
    Order state changes driven by payment providers and administrators.
    """

    @classmethod
    def complete(
        cls,
        order_id,
        provider: str,
        payment_reference: str | None = None,
        dispatcher: SideEffectDispatcher | None = None,
    ) -> ServiceResult[CompletionResult]:
        """
        Mark an order completed, exactly once.

        The guard is one UPDATE filtered on ``stock_decremented=False``. The
        delivery that updates the row decrements stock for every item in the
        same transaction and then, after commit, runs the dispatcher. Every
        other delivery sees zero rows and does nothing.

        Returns:
            ServiceResult with CompletionResult, or failure ORDER_NOT_FOUND
        """
        logger = cls.get_logger()
        pk = _coerce_order_id(order_id)
        log_context = {"order_id": str(order_id), "provider": provider}

        if pk is None or not Order.objects.filter(pk=pk).exists():
            logger.warning("Completion for unknown order", extra=log_context)
            return ServiceResult.failure(
                f"Order not found: {order_id}",
                error_code="ORDER_NOT_FOUND",
            )

        now = timezone.now()
        updates: dict[str, Any] = {
            "status": OrderStatus.COMPLETED,
            "stock_decremented": True,
            "completed_at": now,
            "updated_at": now,
        }
        if payment_reference:
            if provider == PaymentProvider.STRIPE:
                updates["stripe_payment_intent_id"] = payment_reference
            elif provider == PaymentProvider.SQUARE:
                updates["square_payment_id"] = payment_reference

        with cls.atomic():
            claimed = Order.objects.filter(pk=pk, stock_decremented=False).update(
                **updates
            )
            if claimed:
                for item in OrderItem.objects.filter(order_id=pk).only(
                    "product_id", "quantity"
                ):
                    StockLedger.decrement(item.product_id, item.quantity)

        if not claimed:
            logger.info("Order already completed, skipping", extra=log_context)
            return ServiceResult.success(CompletionResult(order_id=pk, first_completion=False))

        logger.info("Order completed", extra=log_context)

        side_effects: list[SideEffectResult] = []
        if dispatcher is not None:
            order = Order.objects.with_items().get(pk=pk)
            side_effects = dispatcher.dispatch(order)

        return ServiceResult.success(
            CompletionResult(order_id=pk, first_completion=True, side_effects=side_effects)
        )

    @classmethod
    def fail(
        cls,
        order_id,
        provider: str,
        reason: str | None = None,
    ) -> ServiceResult[None]:
        """
        Cancel an unpaid order after a failed payment and notify administrators.

        Only pending and processing orders are cancelled. A failure report
        for an order that already left those states (a declined earlier
        attempt delivered after the successful one) is logged and ignored.
        Stock is never touched.
        """
        logger = cls.get_logger()
        pk = _coerce_order_id(order_id)
        log_context = {"order_id": str(order_id), "provider": provider, "reason": reason}

        if pk is None or not Order.objects.filter(pk=pk).exists():
            logger.warning("Payment failure for unknown order", extra=log_context)
            return ServiceResult.failure(
                f"Order not found: {order_id}",
                error_code="ORDER_NOT_FOUND",
            )

        now = timezone.now()
        updated = Order.objects.filter(
            pk=pk,
            status__in=[OrderStatus.PENDING, OrderStatus.PROCESSING],
        ).update(
            status=OrderStatus.CANCELLED,
            cancelled_at=now,
            updated_at=now,
        )
        if not updated:
            logger.info("Payment failure ignored, order no longer unpaid", extra=log_context)
            return ServiceResult.success()

        message = f"Order #{str(pk)[:8].upper()} payment failed"
        if reason:
            message = f"{message}: {reason}"
        AdminNotificationService.create(
            type=AdminNotificationType.PAYMENT_FAILED,
            title="Payment Failed",
            message=message,
            reference_id=str(pk),
        )

        logger.info("Order cancelled after payment failure", extra=log_context)
        return ServiceResult.success()

    @classmethod
    def mark_processing(cls, order_id, provider: str | None = None) -> ServiceResult[Order]:
        """
        Move a pending order to processing.

        Any other current state is left alone, so a late ``payment.created``
        never regresses a completed or cancelled order.
        """
        pk = _coerce_order_id(order_id)
        if pk is None:
            return ServiceResult.failure(
                f"Order not found: {order_id}", error_code="ORDER_NOT_FOUND"
            )

        with cls.atomic():
            order = Order.objects.select_for_update().filter(pk=pk).first()
            if order is None:
                cls.get_logger().warning(
                    "Processing update for unknown order",
                    extra={"order_id": str(order_id), "provider": provider},
                )
                return ServiceResult.failure(
                    f"Order not found: {order_id}", error_code="ORDER_NOT_FOUND"
                )

            if can_proceed(order.mark_processing):
                order.mark_processing()
                order.save(update_fields=["status", "updated_at"])
                cls.get_logger().info(
                    "Order processing",
                    extra={"order_id": str(pk), "provider": provider},
                )
            else:
                cls.get_logger().info(
                    "Processing update ignored",
                    extra={"order_id": str(pk), "status": order.status},
                )

        return ServiceResult.success(order)

    @classmethod
    def refund(cls, order: Order, actor=None) -> Order:
        """
        Mark a completed order refunded (administrative).

        Raises:
            InvalidStateTransitionError: Order is not completed
        """
        with cls.atomic():
            order = Order.objects.select_for_update().get(pk=order.pk)
            if not can_proceed(order.refund):
                raise InvalidStateTransitionError(
                    f"Cannot refund order in '{order.status}' status",
                    details={"current_state": order.status, "transition": "refund"},
                )
            order.refund()
            order.save(update_fields=["status", "updated_at"])

        cls.get_logger().info(
            "Order refunded",
            extra={"order_id": str(order.pk), "actor": str(getattr(actor, "pk", ""))},
        )
        return order

    @classmethod
    def override_status(cls, order: Order, status: str, actor=None) -> Order:
        """
        Set status directly, outside the guarded transitions.

        Never touches ``stock_decremented`` or stock.
        """
        previous = order.status
        now = timezone.now()
        updates: dict[str, Any] = {"status": status, "updated_at": now}
        if status == OrderStatus.CANCELLED:
            updates["cancelled_at"] = now
        Order.objects.filter(pk=order.pk).update(**updates)
        order.refresh_from_db()

        cls.get_logger().warning(
            "Order status overridden",
            extra={
                "order_id": str(order.pk),
                "from_status": previous,
                "to_status": status,
                "actor": str(getattr(actor, "pk", "")),
            },
        )
        return order

    @classmethod
    def apply_outcome(
        cls,
        outcome: PaymentOutcome,
        dispatcher: SideEffectDispatcher | None = None,
    ) -> ServiceResult:
        """Route a normalised provider outcome to the matching transition."""
        if outcome.outcome == Outcome.SUCCEEDED:
            return cls.complete(
                outcome.order_id,
                provider=outcome.provider,
                payment_reference=outcome.payment_reference,
                dispatcher=dispatcher,
            )
        if outcome.outcome == Outcome.FAILED:
            return cls.fail(outcome.order_id, provider=outcome.provider, reason=outcome.reason)
        return cls.mark_processing(outcome.order_id, provider=outcome.provider)
