"""
Webhook payload builders and signing helpers shared by the webhook tests.
"""

import hashlib
import hmac
import time

STRIPE_SECRET = "whsec_test_secret"
SQUARE_KEY = "square-signature-key"
SQUARE_URL = "https://shop.example.com/api/v1/payments/webhooks/square/"


def stripe_payload(event_type, data_object, event_id="evt_test_1"):
    return {
        "id": event_id,
        "object": "event",
        "type": event_type,
        "data": {"object": data_object},
    }


def square_payload(event_type, payment, event_id="sq-evt-1"):
    return {
        "merchant_id": "MERCHANT",
        "event_id": event_id,
        "type": event_type,
        "data": {"type": "payment", "id": payment.get("id"), "object": {"payment": payment}},
    }


def sign_stripe(body: bytes, secret: str = STRIPE_SECRET) -> str:
    timestamp = int(time.time())
    signature = hmac.new(
        secret.encode(), f"{timestamp}.{body.decode()}".encode(), hashlib.sha256
    ).hexdigest()
    return f"t={timestamp},v1={signature}"
