"""
Payment-specific exceptions.

Exception Hierarchy:
    PaymentError (base for payment domain)
    ├── PaymentProcessingError - Provider call failures (HTTP 502)
    │   ├── StripeError - Base for all Stripe errors
    │   │   ├── StripeInvalidRequestError - Invalid request params (permanent)
    │   │   ├── StripeAuthenticationError - Bad API key (permanent)
    │   │   ├── StripeRateLimitError - Rate limited (transient, retry)
    │   │   └── StripeAPIUnavailableError - API unavailable (transient, retry)
    │   └── SquareAPIError - Square REST failures
    └── WebhookError - Inbound delivery problems (HTTP 400)
        ├── WebhookSignatureError - Signature missing or invalid
        └── WebhookPayloadError - Body is not a usable event

    InvalidStateTransitionError - FSM transition not allowed (inherits ConflictError)

Usage:
    from payments.exceptions import StripeError, WebhookPayloadError

    try:
        StripeAdapter.create_checkout_session(params)
    except StripeError as e:
        if e.is_retryable:
            ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from core.exceptions import BaseApplicationError, ConflictError

if TYPE_CHECKING:
    from typing import Any


# =============================================================================
# Payment Domain Exceptions
# =============================================================================


class PaymentError(BaseApplicationError):
    """Base exception for all payment operations."""

    default_error_code: str = "PAYMENT_ERROR"


class PaymentProcessingError(PaymentError):
    """
    Raised when a payment provider call fails.

    Checkout views turn this into a 502; the pending order created for the
    attempt is discarded.
    """

    default_error_code: str = "PAYMENT_PROCESSING_ERROR"
    http_status: int = 502
    is_retryable: bool = False


# =============================================================================
# Stripe-Specific Exceptions
# =============================================================================


class StripeError(PaymentProcessingError):
    """
    Base exception for all Stripe-related errors.

    Attributes:
        stripe_code: Stripe's internal error code
        is_retryable: Whether the operation can be retried
    """

    default_error_code: str = "STRIPE_ERROR"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        stripe_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        details = details or {}
        if stripe_code:
            details["stripe_code"] = stripe_code
        super().__init__(message, error_code=error_code, details=details)
        self.stripe_code = stripe_code


class StripeInvalidRequestError(StripeError):
    """Invalid parameters or unknown Stripe object. Do not retry."""

    default_error_code: str = "STRIPE_INVALID_REQUEST"


class StripeAuthenticationError(StripeError):
    """Stripe rejected the API key. Operational problem, do not retry."""

    default_error_code: str = "STRIPE_AUTHENTICATION_FAILED"


class StripeRateLimitError(StripeError):
    """Rate limited by Stripe API. Retry with backoff."""

    default_error_code: str = "STRIPE_RATE_LIMITED"
    is_retryable: bool = True


class StripeAPIUnavailableError(StripeError):
    """
    Stripe API is temporarily unavailable.

    Covers network connectivity issues, Stripe 5xx responses and timeouts.
    """

    default_error_code: str = "STRIPE_UNAVAILABLE"
    is_retryable: bool = True


# =============================================================================
# Square-Specific Exceptions
# =============================================================================


class SquareAPIError(PaymentProcessingError):
    """
    Raised when a Square REST call fails.

    Attributes:
        status_code: HTTP status returned by Square (None for network errors)
        square_errors: The ``errors`` array from Square's response body
    """

    default_error_code: str = "SQUARE_API_ERROR"

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        square_errors: list[dict[str, Any]] | None = None,
        error_code: str | None = None,
    ):
        details: dict[str, Any] = {}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, error_code=error_code, details=details)
        self.status_code = status_code
        self.square_errors = square_errors or []
        self.is_retryable = status_code is None or status_code >= 500 or status_code == 429


# =============================================================================
# Webhook Exceptions
# =============================================================================


class WebhookError(PaymentError):
    """Base exception for inbound webhook problems."""

    default_error_code: str = "WEBHOOK_ERROR"


class WebhookSignatureError(WebhookError):
    """Signature header missing or verification failed."""

    default_error_code: str = "INVALID_SIGNATURE"


class WebhookPayloadError(WebhookError):
    """Body could not be parsed into a provider event."""

    default_error_code: str = "INVALID_PAYLOAD"


# =============================================================================
# State Machine Exceptions
# =============================================================================


class InvalidStateTransitionError(ConflictError):
    """
    Raised when a state machine transition is not allowed.

    Wraps django-fsm's TransitionNotAllowed in the standard error format.

    Example:
        if not can_proceed(order.refund):
            raise InvalidStateTransitionError(
                f"Cannot refund order in '{order.status}' status",
                details={"current_state": order.status, "transition": "refund"},
            )
    """

    default_error_code: str = "INVALID_STATE_TRANSITION"


__all__ = [
    "PaymentError",
    "PaymentProcessingError",
    "StripeError",
    "StripeInvalidRequestError",
    "StripeAuthenticationError",
    "StripeRateLimitError",
    "StripeAPIUnavailableError",
    "SquareAPIError",
    "WebhookError",
    "WebhookSignatureError",
    "WebhookPayloadError",
    "InvalidStateTransitionError",
]
