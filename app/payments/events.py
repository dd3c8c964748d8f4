"""
Provider event normalisation.

Webhook bodies are parsed once, at the boundary, into StripeEvent or
SquareEvent. Payment events are then reduced to a provider-agnostic
PaymentOutcome that the order lifecycle understands.

Usage:
    from payments.events import StripeEvent, stripe_outcome

    event = StripeEvent.from_payload(json.loads(body))
    outcome = stripe_outcome(event)
    if outcome is not None:
        OrderLifecycleService.apply_outcome(outcome, dispatcher)
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from orders.models import Order
from payments.exceptions import WebhookPayloadError
from payments.state_machines import PaymentProvider

logger = logging.getLogger(__name__)

STRIPE_SUCCESS_EVENTS = frozenset({"checkout.session.completed", "payment_intent.succeeded"})
STRIPE_FAILURE_EVENTS = frozenset({"payment_intent.payment_failed"})

SQUARE_PAYMENT_CREATED = "payment.created"
SQUARE_PAYMENT_UPDATED = "payment.updated"
SQUARE_FAILED_STATUSES = frozenset({"FAILED", "CANCELED"})

# Payment links created before reference_id was set only carry the order id
# in the payment note
LEGACY_NOTE_PATTERN = re.compile(r"Order: ([a-f0-9-]+)")


class Outcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    PROCESSING = "processing"


@dataclass(frozen=True)
class PaymentOutcome:
    """
    What a provider said about one of our orders.

    Attributes:
        order_id: Our order id (as received, not yet validated)
        outcome: succeeded, failed or processing
        provider: stripe or square
        payment_reference: Provider payment id (payment intent / Square payment)
        reason: Failure reason, when the provider gave one
    """

    order_id: str
    outcome: Outcome
    provider: str
    payment_reference: str | None = None
    reason: str | None = None


@dataclass(frozen=True)
class StripeEvent:
    id: str
    type: str
    data_object: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    provider = PaymentProvider.STRIPE

    @classmethod
    def from_payload(cls, payload: Any) -> StripeEvent:
        """
        Raises:
            WebhookPayloadError: Not an object, or id/type missing
        """
        if not isinstance(payload, dict):
            raise WebhookPayloadError("Stripe event must be a JSON object")
        event_id = payload.get("id")
        event_type = payload.get("type")
        if not event_id or not event_type:
            raise WebhookPayloadError("Stripe event is missing id or type")

        data = payload.get("data") or {}
        data_object = data.get("object") if isinstance(data, dict) else None
        return cls(
            id=str(event_id),
            type=str(event_type),
            data_object=data_object if isinstance(data_object, dict) else {},
            raw=payload,
        )

    @property
    def order_id(self) -> str | None:
        metadata = self.data_object.get("metadata") or {}
        return metadata.get("order_id") or None


@dataclass(frozen=True)
class SquareEvent:
    id: str
    type: str
    data: dict[str, Any] = field(default_factory=dict)
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    provider = PaymentProvider.SQUARE

    @classmethod
    def from_payload(cls, payload: Any) -> SquareEvent:
        """
        Raises:
            WebhookPayloadError: Not an object, or event_id/type missing
        """
        if not isinstance(payload, dict):
            raise WebhookPayloadError("Square event must be a JSON object")
        event_id = payload.get("event_id")
        event_type = payload.get("type")
        if not event_id or not event_type:
            raise WebhookPayloadError("Square event is missing event_id or type")

        data = payload.get("data")
        return cls(
            id=str(event_id),
            type=str(event_type),
            data=data if isinstance(data, dict) else {},
            raw=payload,
        )

    @property
    def payment(self) -> dict[str, Any]:
        obj = self.data.get("object") or {}
        payment = obj.get("payment") if isinstance(obj, dict) else None
        return payment if isinstance(payment, dict) else {}


ProviderEvent = Union[StripeEvent, SquareEvent]


def stripe_outcome(event: StripeEvent) -> PaymentOutcome | None:
    """
    Reduce a Stripe payment event to an outcome.

    Returns None for event types that say nothing about an order, and for
    payment events without ``metadata.order_id`` (logged).
    """
    if event.type in STRIPE_SUCCESS_EVENTS:
        outcome = Outcome.SUCCEEDED
    elif event.type in STRIPE_FAILURE_EVENTS:
        outcome = Outcome.FAILED
    else:
        return None

    order_id = event.order_id
    if not order_id:
        logger.warning(
            "Stripe payment event without order_id metadata",
            extra={"event_id": event.id, "event_type": event.type},
        )
        return None

    if event.type == "checkout.session.completed":
        reference = event.data_object.get("payment_intent")
    else:
        reference = event.data_object.get("id")

    reason = None
    if outcome == Outcome.FAILED:
        reason = (event.data_object.get("last_payment_error") or {}).get("message")

    return PaymentOutcome(
        order_id=order_id,
        outcome=outcome,
        provider=PaymentProvider.STRIPE,
        payment_reference=reference if isinstance(reference, str) else None,
        reason=reason,
    )


def _known_order_id(value: Any) -> str | None:
    try:
        pk = uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None
    return str(value) if Order.objects.filter(pk=pk).exists() else None


def correlate_square_payment(payment: dict[str, Any]) -> str | None:
    """
    Find our order id for a Square payment.

    Tried in order:
        1. ``payment.reference_id``, when it names one of our orders
        2. ``payment.order_id`` matched against Order.square_order_id
        3. ``Order: <uuid>`` in ``payment.note`` (legacy links, logged)

    A reference set by something else (POS, another integration) falls
    through to the next step.
    """
    reference_id = payment.get("reference_id")
    if reference_id:
        order_id = _known_order_id(reference_id)
        if order_id:
            return order_id
        logger.info(
            "Square reference_id is not one of our orders",
            extra={"square_payment_id": payment.get("id"), "reference_id": reference_id},
        )

    square_order_id = payment.get("order_id")
    if square_order_id:
        order_pk = (
            Order.objects.filter(square_order_id=square_order_id)
            .values_list("pk", flat=True)
            .first()
        )
        if order_pk is not None:
            return str(order_pk)

    match = LEGACY_NOTE_PATTERN.search(payment.get("note") or "")
    if match:
        logger.warning(
            "Square payment correlated through payment note",
            extra={"square_payment_id": payment.get("id"), "order_id": match.group(1)},
        )
        return match.group(1)

    return None


def square_outcome(event: SquareEvent) -> PaymentOutcome | None:
    """
    Reduce a Square payment event to an outcome.

    ``payment.created`` → processing; ``payment.updated`` → succeeded on
    COMPLETED, failed on FAILED/CANCELED, nothing otherwise.
    """
    payment = event.payment
    status = (payment.get("status") or "").upper()

    if event.type == SQUARE_PAYMENT_CREATED:
        outcome = Outcome.PROCESSING
    elif event.type == SQUARE_PAYMENT_UPDATED and status == "COMPLETED":
        outcome = Outcome.SUCCEEDED
    elif event.type == SQUARE_PAYMENT_UPDATED and status in SQUARE_FAILED_STATUSES:
        outcome = Outcome.FAILED
    else:
        return None

    order_id = correlate_square_payment(payment)
    if not order_id:
        logger.warning(
            "Square payment could not be correlated to an order",
            extra={
                "event_id": event.id,
                "square_payment_id": payment.get("id"),
                "square_order_id": payment.get("order_id"),
            },
        )
        return None

    return PaymentOutcome(
        order_id=order_id,
        outcome=outcome,
        provider=PaymentProvider.SQUARE,
        payment_reference=payment.get("id"),
        reason=status.lower() if outcome == Outcome.FAILED else None,
    )
