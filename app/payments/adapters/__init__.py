"""
Payment adapters for external services.

All payment provider API calls go through these adapters to ensure
consistent error handling, timeouts and observability.

Usage:
    from payments.adapters import SquareAdapter, StripeAdapter
"""

from payments.adapters.square_adapter import (
    CatalogListing,
    CreatePaymentLinkParams,
    PaymentLinkResult,
    SquareAdapter,
    SquareLineItem,
)
from payments.adapters.stripe_adapter import (
    CheckoutSessionResult,
    CreateCheckoutSessionParams,
    StripeAdapter,
)

__all__ = [
    "CatalogListing",
    "CheckoutSessionResult",
    "CreateCheckoutSessionParams",
    "CreatePaymentLinkParams",
    "PaymentLinkResult",
    "SquareAdapter",
    "SquareLineItem",
    "StripeAdapter",
]
