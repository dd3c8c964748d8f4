"""
Payment domain models.

- WebhookEvent: Audit record of every verified provider webhook delivery
"""

from payments.models.webhook_event import WebhookEvent

__all__ = [
    "WebhookEvent",
]
