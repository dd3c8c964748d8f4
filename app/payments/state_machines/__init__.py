"""
State machine enums for payment models.
"""

from payments.state_machines.states import PaymentProvider, WebhookEventStatus

__all__ = [
    "PaymentProvider",
    "WebhookEventStatus",
]
