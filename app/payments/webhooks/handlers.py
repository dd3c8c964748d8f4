"""
Webhook event handlers for Stripe and Square.

This module provides a handler registry keyed by (provider, event type)
and the handlers for every event the store acts on.

The handler registry allows:
- Clean separation between event routing and handling
- Easy extension for new event types
- Unknown event types to be acknowledged without failing

Handlers return a ServiceResult for expected outcomes (an order that cannot
be correlated is a failure result, not an exception). Anything they raise
is treated as an internal error by the view, which answers 500 so the
provider redelivers.

Usage:
    from payments.webhooks.handlers import dispatch_webhook, register_handler

    @register_handler(PaymentProvider.STRIPE, "custom.event")
    def handle_custom_event(event, dispatcher) -> ServiceResult:
        ...

    result = dispatch_webhook(event, dispatcher)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from catalog.services import CatalogSyncService
from catalog.tasks import sync_square_catalog_task
from core.services import ServiceResult
from orders.services import OrderLifecycleService
from payments.events import square_outcome, stripe_outcome
from payments.state_machines import PaymentProvider

if TYPE_CHECKING:
    from notifications.dispatcher import SideEffectDispatcher
    from payments.events import PaymentOutcome, ProviderEvent, SquareEvent, StripeEvent

logger = logging.getLogger(__name__)

Handler = Callable[["ProviderEvent", "SideEffectDispatcher"], ServiceResult]


# =============================================================================
# Handler Registry
# =============================================================================


# Maps (provider, event type) to handler functions
WEBHOOK_HANDLERS: dict[tuple[str, str], Handler] = {}


def register_handler(provider: str, *event_types: str) -> Callable[[Handler], Handler]:
    """
    Decorator to register a handler for one or more event types.

    Usage:
        @register_handler(PaymentProvider.SQUARE, "payment.created", "payment.updated")
        def handle_square_payment(event, dispatcher) -> ServiceResult:
            ...
    """

    def decorator(func: Handler) -> Handler:
        for event_type in event_types:
            WEBHOOK_HANDLERS[(str(provider), event_type)] = func
            logger.debug(f"Registered webhook handler for {provider}:{event_type}")
        return func

    return decorator


def dispatch_webhook(event: ProviderEvent, dispatcher: SideEffectDispatcher) -> ServiceResult:
    """
    Dispatch a parsed event to its handler.

    If no handler is registered the event is acknowledged with a success
    result.
    """
    handler = WEBHOOK_HANDLERS.get((str(event.provider), event.type))
    log_context = {"provider": str(event.provider), "event_id": event.id, "event_type": event.type}

    if not handler:
        logger.info(f"No handler registered for event type: {event.type}", extra=log_context)
        return ServiceResult.success(None)

    logger.info(f"Dispatching {event.type} to handler", extra=log_context)
    return handler(event, dispatcher)


def _apply(outcome: PaymentOutcome | None, event: ProviderEvent, dispatcher) -> ServiceResult:
    if outcome is None:
        return ServiceResult.failure(
            f"{event.type} could not be correlated to an order",
            error_code="ORDER_NOT_CORRELATED",
        )
    return OrderLifecycleService.apply_outcome(outcome, dispatcher)


# =============================================================================
# Payment Handlers
# =============================================================================


@register_handler(
    PaymentProvider.STRIPE,
    "checkout.session.completed",
    "payment_intent.succeeded",
    "payment_intent.payment_failed",
)
def handle_stripe_payment(event: StripeEvent, dispatcher: SideEffectDispatcher) -> ServiceResult:
    """
    Complete or cancel the order named in ``metadata.order_id``.

    Both success events are registered; whichever arrives first completes
    the order and the other finds the guard already taken.
    """
    return _apply(stripe_outcome(event), event, dispatcher)


@register_handler(PaymentProvider.SQUARE, "payment.created", "payment.updated")
def handle_square_payment(event: SquareEvent, dispatcher: SideEffectDispatcher) -> ServiceResult:
    """Move the correlated order to processing, completed or cancelled."""
    status = (event.payment.get("status") or "").upper()
    if event.type == "payment.updated" and status not in {"COMPLETED", "FAILED", "CANCELED"}:
        logger.info(
            "Square payment update ignored",
            extra={"event_id": event.id, "payment_status": status},
        )
        return ServiceResult.success(None)

    return _apply(square_outcome(event), event, dispatcher)


# =============================================================================
# Catalog Handlers
# =============================================================================


@register_handler(PaymentProvider.STRIPE, "product.created", "product.updated")
def handle_stripe_product(event: StripeEvent, dispatcher: SideEffectDispatcher) -> ServiceResult:
    product = CatalogSyncService.apply_stripe_product(
        event.data_object,
        event_type=event.type,
        discord=dispatcher.discord,
    )
    return ServiceResult.success(product)


@register_handler(PaymentProvider.STRIPE, "product.deleted")
def handle_stripe_product_deleted(
    event: StripeEvent, dispatcher: SideEffectDispatcher
) -> ServiceResult:
    return ServiceResult.success(
        CatalogSyncService.deactivate_stripe_product(event.data_object["id"])
    )


@register_handler(PaymentProvider.STRIPE, "price.created", "price.updated")
def handle_stripe_price(event: StripeEvent, dispatcher: SideEffectDispatcher) -> ServiceResult:
    return ServiceResult.success(CatalogSyncService.apply_stripe_price(event.data_object))


@register_handler(PaymentProvider.STRIPE, "price.deleted")
def handle_stripe_price_deleted(
    event: StripeEvent, dispatcher: SideEffectDispatcher
) -> ServiceResult:
    # The product keeps its last price until a new one is published
    return ServiceResult.success(None)


@register_handler(PaymentProvider.SQUARE, "catalog.version.updated")
def handle_square_catalog_updated(
    event: SquareEvent, dispatcher: SideEffectDispatcher
) -> ServiceResult:
    result = sync_square_catalog_task.delay()
    logger.info(
        "Square catalog sync queued",
        extra={"event_id": event.id, "task_id": result.id},
    )
    return ServiceResult.success(result.id)
