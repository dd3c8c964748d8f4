"""
Webhook signature verification.

Both verifiers return a plain bool and never raise: a delivery either
proves it came from the provider or it is rejected with a 400 by the
calling view.

Stripe:
    ``Stripe-Signature: t=<unix ts>,v1=<hex hmac>[,v1=...]`` over
    ``"{t}.{body}"`` with HMAC-SHA256. Verification is delegated to the
    Stripe SDK.

Square:
    ``X-Square-Signature: base64(hmac_sha256(key, notification_url + body))``.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import logging

import stripe

logger = logging.getLogger(__name__)


def _as_text(payload: bytes | str) -> str | None:
    if isinstance(payload, str):
        return payload
    try:
        return payload.decode("utf-8")
    except UnicodeDecodeError:
        return None


def verify_stripe_signature(
    payload: bytes | str,
    header: str | None,
    secret: str | None,
    tolerance: int | None = None,
) -> bool:
    """
    Check a Stripe-Signature header against the raw request body.

    Args:
        payload: Raw request body, exactly as received
        header: Stripe-Signature header value
        secret: Endpoint signing secret (whsec_...)
        tolerance: Maximum age of the signed timestamp in seconds;
            None or 0 disables the freshness check

    Returns:
        True only if one of the v1 signatures matches
    """
    if not secret or not header:
        return False

    body = _as_text(payload)
    if body is None:
        return False

    try:
        stripe.WebhookSignature.verify_header(body, header, secret, tolerance=tolerance or None)
    except stripe.SignatureVerificationError as e:
        logger.debug("Stripe signature rejected", extra={"reason": str(e)})
        return False
    return True


def compute_square_signature(payload: bytes | str, secret: str, notification_url: str) -> str:
    """Base64 HMAC-SHA256 of ``notification_url + body``."""
    body = payload if isinstance(payload, bytes) else payload.encode("utf-8")
    digest = hmac.new(
        secret.encode("utf-8"),
        notification_url.encode("utf-8") + body,
        hashlib.sha256,
    ).digest()
    return base64.b64encode(digest).decode("ascii")


def verify_square_signature(
    payload: bytes | str,
    signature: str | None,
    secret: str | None,
    notification_url: str | None,
) -> bool:
    """
    Check an X-Square-Signature header against the raw request body.

    Args:
        payload: Raw request body
        signature: X-Square-Signature header value
        secret: Webhook signature key from the Square dashboard
        notification_url: The URL registered with Square for this endpoint

    Returns:
        True only on an exact, constant-time match
    """
    if not (signature and secret and notification_url):
        return False

    expected = compute_square_signature(payload, secret, notification_url)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().encode("utf-8"))
