"""
Stripe API adapter for storefront operations.

This module provides the StripeAdapter class which encapsulates all
Stripe API interactions. All Stripe calls should go through this
adapter to ensure consistent error handling, timeouts and observability.

Features:
- Configurable timeouts on all API calls
- Automatic error translation to domain exceptions
- Structured logging with timing metrics
- Idempotency keys on session creation

Configuration (via settings):
- STRIPE_SECRET_KEY: Stripe API secret key
- STRIPE_API_TIMEOUT_SECONDS: API call timeout (default: 10)
- STRIPE_MAX_RETRIES: SDK network retries (default: 3)

Usage:
    from payments.adapters.stripe_adapter import (
        CreateCheckoutSessionParams,
        StripeAdapter,
    )

    session = StripeAdapter.create_checkout_session(
        CreateCheckoutSessionParams(
            line_items=[{"price": "price_123", "quantity": 2}],
            success_url="https://store.example/success?order_id=...",
            cancel_url="https://store.example/cart",
            metadata={"order_id": str(order.id)},
            idempotency_key=f"checkout:{order.id}",
        )
    )
    redirect_to(session.url)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import stripe
from django.conf import settings

from payments.exceptions import (
    StripeAPIUnavailableError,
    StripeAuthenticationError,
    StripeInvalidRequestError,
    StripeRateLimitError,
)


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class CreateCheckoutSessionParams:
    """
    Parameters for creating a hosted Stripe Checkout Session.

    Attributes:
        line_items: Stripe line items (``price`` or ``price_data`` + ``quantity``)
        success_url: Redirect after payment
        cancel_url: Redirect when the buyer backs out
        idempotency_key: Unique key for idempotent creation
        metadata: Key-value pairs copied onto the session; ``order_id`` is
            what webhooks correlate on
        customer_email: Pre-filled receipt email
    """

    line_items: list[dict[str, Any]]
    success_url: str
    cancel_url: str
    idempotency_key: str
    metadata: dict[str, str] = field(default_factory=dict)
    customer_email: str | None = None

    def __post_init__(self) -> None:
        if not self.line_items:
            raise ValueError("line_items must not be empty")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")


@dataclass
class CheckoutSessionResult:
    """
    Result from Stripe Checkout Session creation.

    Attributes:
        id: Session ID (cs_xxx)
        url: Hosted checkout page URL
        payment_status: Stripe payment_status at creation
    """

    id: str
    url: str
    payment_status: str | None = None


# =============================================================================
# Stripe Adapter
# =============================================================================


class StripeAdapter:
    """
    Adapter for Stripe API operations.

    All methods are classmethods - no instance state is maintained.
    Thread-safe for use from Celery workers.
    """

    # =========================================================================
    # Configuration
    # =========================================================================

    @staticmethod
    def _configure_stripe() -> None:
        """Configure Stripe client with API key, timeout and retries."""
        stripe.api_key = settings.STRIPE_SECRET_KEY
        stripe.max_network_retries = getattr(settings, "STRIPE_MAX_RETRIES", 3)
        timeout = getattr(settings, "STRIPE_API_TIMEOUT_SECONDS", 10)
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

    @classmethod
    def get_logger(cls) -> logging.Logger:
        """Get logger for this adapter."""
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    # =========================================================================
    # Checkout
    # =========================================================================

    @classmethod
    def create_checkout_session(
        cls,
        params: CreateCheckoutSessionParams,
    ) -> CheckoutSessionResult:
        """
        Create a hosted Checkout Session in payment mode.

        Raises:
            StripeInvalidRequestError: Invalid parameters (unknown price id, ...)
            StripeAPIUnavailableError: Stripe unreachable or erroring
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "create_checkout_session",
            "order_id": params.metadata.get("order_id"),
            "line_item_count": len(params.line_items),
        }

        start_time = time.time()
        logger.info("Starting Stripe operation", extra=log_context)

        try:
            session = stripe.checkout.Session.create(
                mode="payment",
                payment_method_types=["card"],
                line_items=params.line_items,
                success_url=params.success_url,
                cancel_url=params.cancel_url,
                metadata=params.metadata,
                customer_email=params.customer_email or None,
                idempotency_key=params.idempotency_key,
            )
        except stripe.StripeError as e:
            cls._handle_stripe_error(e, log_context, (time.time() - start_time) * 1000)
            raise

        logger.info(
            "Stripe operation completed",
            extra={
                **log_context,
                "session_id": session.id,
                "duration_ms": (time.time() - start_time) * 1000,
            },
        )

        return CheckoutSessionResult(
            id=session.id,
            url=session.url,
            payment_status=getattr(session, "payment_status", None),
        )

    # =========================================================================
    # Catalog
    # =========================================================================

    @classmethod
    def list_active_products(cls) -> list[dict[str, Any]]:
        """Return every active Stripe product as a plain dict."""
        return cls._list_all(stripe.Product, "list_active_products", active=True)

    @classmethod
    def list_active_prices(cls) -> list[dict[str, Any]]:
        """Return every active Stripe price as a plain dict."""
        return cls._list_all(stripe.Price, "list_active_prices", active=True)

    @classmethod
    def update_product_metadata(
        cls,
        product_id: str,
        metadata: dict[str, str],
    ) -> dict[str, Any]:
        """
        Merge ``metadata`` into a Stripe product's metadata.

        Stripe metadata values are strings; callers stringify numbers.
        """
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {
            "operation": "update_product_metadata",
            "stripe_product_id": product_id,
            "keys": sorted(metadata),
        }
        start_time = time.time()

        try:
            product = stripe.Product.modify(product_id, metadata=metadata)
        except stripe.StripeError as e:
            cls._handle_stripe_error(e, log_context, (time.time() - start_time) * 1000)
            raise

        logger.info(
            "Stripe operation completed",
            extra={**log_context, "duration_ms": (time.time() - start_time) * 1000},
        )
        return product.to_dict()

    @classmethod
    def _list_all(cls, resource, operation: str, **filters) -> list[dict[str, Any]]:
        cls._configure_stripe()
        logger = cls.get_logger()

        log_context = {"operation": operation}
        start_time = time.time()

        try:
            page = resource.list(limit=100, **filters)
            objects = [obj.to_dict() for obj in page.auto_paging_iter()]
        except stripe.StripeError as e:
            cls._handle_stripe_error(e, log_context, (time.time() - start_time) * 1000)
            raise

        logger.info(
            "Stripe operation completed",
            extra={
                **log_context,
                "count": len(objects),
                "duration_ms": (time.time() - start_time) * 1000,
            },
        )
        return objects

    # =========================================================================
    # Error Handling
    # =========================================================================

    @classmethod
    def _handle_stripe_error(
        cls,
        error: stripe.StripeError,
        log_context: dict[str, Any],
        duration_ms: float,
    ) -> None:
        """
        Translate Stripe exceptions to domain exceptions.

        Raises:
            StripeInvalidRequestError: Invalid request parameters
            StripeAuthenticationError: Invalid API key
            StripeRateLimitError: Rate limited
            StripeAPIUnavailableError: API unavailable or unexpected error
        """
        logger = cls.get_logger()
        log_context = {**log_context, "duration_ms": duration_ms}

        if isinstance(error, stripe.InvalidRequestError):
            logger.error(
                "Invalid request to Stripe",
                extra={**log_context, "stripe_code": error.code},
            )
            raise StripeInvalidRequestError(
                str(error.user_message or error),
                stripe_code=error.code,
            ) from error

        if isinstance(error, stripe.AuthenticationError):
            logger.critical(
                "Stripe authentication failed - check API key",
                extra=log_context,
            )
            raise StripeAuthenticationError(
                "Stripe authentication failed",
                stripe_code="authentication_error",
            ) from error

        if isinstance(error, stripe.RateLimitError):
            logger.warning("Rate limited by Stripe", extra=log_context)
            raise StripeRateLimitError(
                "Stripe rate limit exceeded. Please retry.",
                stripe_code="rate_limit",
            ) from error

        if isinstance(error, stripe.APIConnectionError):
            logger.error("Connection error to Stripe", extra=log_context, exc_info=True)
            raise StripeAPIUnavailableError(
                "Could not connect to Stripe. Please retry.",
                stripe_code="api_connection_error",
            ) from error

        logger.error(
            f"Stripe API error: {type(error).__name__}",
            extra=log_context,
            exc_info=True,
        )
        raise StripeAPIUnavailableError(
            "Stripe service error. Please retry.",
            stripe_code=getattr(error, "code", None) or "api_error",
        ) from error
