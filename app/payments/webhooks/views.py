"""
Webhook endpoint views for Stripe and Square.

Both views follow the same flow:
1. Verify the signature over the raw body (400 on failure)
2. Parse the body into a provider event (400 on failure)
3. Create/retrieve the WebhookEvent record (audit + redelivery short-circuit)
4. Dispatch synchronously to the registered handler
5. Return 200, or 500 when the handler raised so the provider redelivers

Correctness never depends on step 3: the order completion guard makes a
duplicate delivery harmless even if it slips past the audit table.

Usage:
    # In urls.py
    from payments.webhooks.views import square_webhook, stripe_webhook

    urlpatterns = [
        path("webhooks/stripe/", stripe_webhook, name="stripe_webhook"),
        path("webhooks/square/", square_webhook, name="square_webhook"),
    ]
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING

from django.conf import settings
from django.http import HttpRequest, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

from notifications.dispatcher import SideEffectDispatcher
from payments.events import SquareEvent, StripeEvent
from payments.exceptions import WebhookPayloadError
from payments.models import WebhookEvent
from payments.signatures import verify_square_signature, verify_stripe_signature
from payments.state_machines import WebhookEventStatus
from payments.webhooks.handlers import dispatch_webhook

if TYPE_CHECKING:
    from payments.events import ProviderEvent

logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": message}, status=status)


def _parse_body(body: bytes):
    try:
        return json.loads(body)
    except (UnicodeDecodeError, ValueError) as e:
        raise WebhookPayloadError("Body is not valid JSON") from e


def _process(event: ProviderEvent) -> JsonResponse:
    """Record, dispatch and answer for a verified, parsed event."""
    log_context = {
        "provider": str(event.provider),
        "event_id": event.id,
        "event_type": event.type,
    }

    webhook_event, created = WebhookEvent.objects.get_or_create(
        provider=event.provider,
        event_id=event.id,
        defaults={
            "event_type": event.type,
            "payload": event.raw,
            "status": WebhookEventStatus.PENDING,
        },
    )

    if not created and webhook_event.is_processed:
        logger.info("Webhook already processed, returning success", extra=log_context)
        return JsonResponse({"received": True})

    webhook_event.mark_processing()
    webhook_event.save(update_fields=["status", "attempts", "updated_at"])

    try:
        result = dispatch_webhook(event, SideEffectDispatcher.from_settings())
    except Exception as e:
        logger.exception("Webhook handler failed", extra=log_context)
        webhook_event.mark_failed(f"{type(e).__name__}: {e}")
        webhook_event.save(update_fields=["status", "error_message", "updated_at"])
        return _error("Webhook handler failed", 500)

    webhook_event.mark_processed()
    if not result.success:
        # Acknowledged anyway; redelivery would not correlate either
        webhook_event.error_message = result.error
        logger.warning(
            "Webhook acknowledged without effect",
            extra={**log_context, "error_code": result.error_code},
        )
    webhook_event.save(update_fields=["status", "processed_at", "error_message", "updated_at"])

    return JsonResponse({"received": True})


@csrf_exempt
@require_POST
def stripe_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive Stripe webhook events.

    Returns:
        - 200: Event handled, acknowledged or duplicate
        - 400: Missing/invalid signature or unusable payload
        - 500: Handler raised; Stripe will redeliver

    Example Stripe-Signature header:
        t=1614556800,v1=xxx,v0=yyy
    """
    payload = request.body
    signature = request.headers.get("Stripe-Signature", "")

    if not signature:
        logger.warning("Webhook received without Stripe-Signature header")
        return _error("Missing signature", 400)

    if not verify_stripe_signature(
        payload,
        signature,
        settings.STRIPE_WEBHOOK_SECRET,
        tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
    ):
        logger.warning("Stripe webhook signature verification failed")
        return _error("Invalid signature", 400)

    try:
        event = StripeEvent.from_payload(_parse_body(payload))
    except WebhookPayloadError as e:
        logger.warning("Invalid Stripe webhook payload", extra={"error": e.message})
        return _error(e.message, 400)

    logger.info(
        f"Received Stripe webhook: {event.type}",
        extra={"event_id": event.id, "event_type": event.type},
    )
    return _process(event)


@csrf_exempt
@require_POST
def square_webhook(request: HttpRequest) -> JsonResponse:
    """
    Receive Square webhook events.

    The signed message is the notification URL registered with Square
    followed by the body. SQUARE_WEBHOOK_URL is used when set; otherwise
    the URL this request arrived on.
    """
    payload = request.body
    signature = request.headers.get("X-Square-Signature", "")

    if not signature:
        logger.warning("Webhook received without X-Square-Signature header")
        return _error("Missing signature", 400)

    notification_url = settings.SQUARE_WEBHOOK_URL or request.build_absolute_uri()
    if not verify_square_signature(
        payload,
        signature,
        settings.SQUARE_WEBHOOK_SIGNATURE_KEY,
        notification_url,
    ):
        logger.warning(
            "Square webhook signature verification failed",
            extra={"notification_url": notification_url},
        )
        return _error("Invalid signature", 400)

    try:
        event = SquareEvent.from_payload(_parse_body(payload))
    except WebhookPayloadError as e:
        logger.warning("Invalid Square webhook payload", extra={"error": e.message})
        return _error(e.message, 400)

    logger.info(
        f"Received Square webhook: {event.type}",
        extra={"event_id": event.id, "event_type": event.type},
    )
    return _process(event)

