"""
Square REST API adapter.

Covers the two Square surfaces the store uses: hosted payment links for
checkout and catalog listing for product sync. Calls go over plain HTTPS
with ``requests``; errors are translated to SquareAPIError.

Configuration (via settings):
- SQUARE_ACCESS_TOKEN: Bearer token
- SQUARE_LOCATION_ID: Location that owns the payment links
- SQUARE_API_BASE_URL: API root (sandbox or production)
- SQUARE_API_VERSION: Value of the Square-Version header

Usage:
    from payments.adapters.square_adapter import (
        CreatePaymentLinkParams,
        SquareAdapter,
    )

    link = SquareAdapter.create_payment_link(
        CreatePaymentLinkParams(
            reference_id=str(order.id),
            idempotency_key=str(order.id),
            line_items=[...],
            redirect_url="https://store.example/success?order_id=...",
        )
    )
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any

import requests
from django.conf import settings

from payments.exceptions import SquareAPIError

CATALOG_PAGE_TYPES = "ITEM,IMAGE"


# =============================================================================
# Data Types
# =============================================================================


@dataclass
class SquareLineItem:
    """Ad-hoc order line item (name + base price, no catalog reference)."""

    name: str
    quantity: int
    amount_cents: int
    currency: str = "USD"

    def to_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            # Square expects the quantity as a decimal string
            "quantity": str(self.quantity),
            "base_price_money": {
                "amount": self.amount_cents,
                "currency": self.currency.upper(),
            },
        }


@dataclass
class CreatePaymentLinkParams:
    """
    Parameters for creating a Square payment link.

    Attributes:
        reference_id: Our order id; Square copies it onto the order and the
            payment, which is what webhooks correlate on
        idempotency_key: Unique key for idempotent creation
        line_items: Order lines
        redirect_url: Where Square sends the buyer after paying
        buyer_email: Pre-filled email
        payment_note: Human readable note shown in the Square dashboard
    """

    reference_id: str
    idempotency_key: str
    line_items: list[SquareLineItem]
    redirect_url: str
    buyer_email: str | None = None
    payment_note: str | None = None

    def __post_init__(self) -> None:
        if not self.line_items:
            raise ValueError("line_items must not be empty")
        if not self.idempotency_key:
            raise ValueError("idempotency_key is required")


@dataclass
class PaymentLinkResult:
    """
    Result from payment link creation.

    Attributes:
        id: Payment link id
        url: Hosted checkout URL
        order_id: Square order created behind the link
    """

    id: str
    url: str
    order_id: str | None = None


@dataclass
class CatalogListing:
    """Every catalog ITEM plus an image-id to URL map."""

    items: list[dict[str, Any]] = field(default_factory=list)
    image_urls: dict[str, str] = field(default_factory=dict)


# =============================================================================
# Square Adapter
# =============================================================================


class SquareAdapter:
    """
    Adapter for Square REST operations.

    All methods are classmethods - no instance state is maintained.
    """

    @classmethod
    def get_logger(cls) -> logging.Logger:
        return logging.getLogger(f"{cls.__module__}.{cls.__name__}")

    @staticmethod
    def _headers() -> dict[str, str]:
        return {
            "Authorization": f"Bearer {settings.SQUARE_ACCESS_TOKEN}",
            "Square-Version": settings.SQUARE_API_VERSION,
            "Content-Type": "application/json",
        }

    # =========================================================================
    # Checkout
    # =========================================================================

    @classmethod
    def create_payment_link(cls, params: CreatePaymentLinkParams) -> PaymentLinkResult:
        """
        Create a hosted payment link backed by a Square order.

        Raises:
            SquareAPIError: Request failed or the response had no checkout URL
        """
        body: dict[str, Any] = {
            "idempotency_key": params.idempotency_key,
            "order": {
                "location_id": settings.SQUARE_LOCATION_ID,
                "reference_id": params.reference_id,
                "line_items": [item.to_payload() for item in params.line_items],
            },
            "checkout_options": {
                "redirect_url": params.redirect_url,
                "ask_for_shipping_address": False,
                "accepted_payment_methods": {"apple_pay": True, "google_pay": True},
            },
        }
        if params.buyer_email:
            body["pre_populated_data"] = {"buyer_email": params.buyer_email}
        if params.payment_note:
            body["payment_note"] = params.payment_note[:500]

        data = cls._request(
            "POST",
            "/v2/online-checkout/payment-links",
            operation="create_payment_link",
            json=body,
            log_context={"reference_id": params.reference_id},
        )

        link = data.get("payment_link") or {}
        if not link.get("url"):
            raise SquareAPIError("No checkout URL received from Square")

        return PaymentLinkResult(
            id=link.get("id", ""),
            url=link["url"],
            order_id=link.get("order_id"),
        )

    # =========================================================================
    # Catalog
    # =========================================================================

    @classmethod
    def list_catalog(cls) -> CatalogListing:
        """
        Page through the catalog collecting ITEM objects and image URLs.

        Deleted items are included; callers decide how to treat them.
        """
        listing = CatalogListing()
        cursor: str | None = None

        while True:
            query = {"types": CATALOG_PAGE_TYPES}
            if cursor:
                query["cursor"] = cursor

            data = cls._request(
                "GET",
                "/v2/catalog/list",
                operation="list_catalog",
                params=query,
            )

            for obj in data.get("objects", []):
                if obj.get("type") == "ITEM":
                    listing.items.append(obj)
                elif obj.get("type") == "IMAGE":
                    url = (obj.get("image_data") or {}).get("url")
                    if url:
                        listing.image_urls[obj["id"]] = url

            cursor = data.get("cursor")
            if not cursor:
                break

        cls.get_logger().info(
            "Square catalog listed",
            extra={"items": len(listing.items), "images": len(listing.image_urls)},
        )
        return listing

    # =========================================================================
    # Transport
    # =========================================================================

    @classmethod
    def _request(
        cls,
        method: str,
        path: str,
        *,
        operation: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
        log_context: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        logger = cls.get_logger()
        log_context = {"operation": operation, **(log_context or {})}
        start_time = time.time()

        try:
            response = requests.request(
                method,
                f"{settings.SQUARE_API_BASE_URL.rstrip('/')}{path}",
                headers=cls._headers(),
                json=json,
                params=params,
                timeout=settings.SQUARE_API_TIMEOUT_SECONDS,
            )
        except requests.RequestException as e:
            logger.error("Connection error to Square", extra=log_context, exc_info=True)
            raise SquareAPIError(f"Could not connect to Square: {e}") from e

        duration_ms = (time.time() - start_time) * 1000

        try:
            data = response.json()
        except ValueError:
            data = {}

        if not response.ok:
            errors = data.get("errors") or []
            detail = errors[0].get("detail") if errors else None
            logger.error(
                "Square API error",
                extra={
                    **log_context,
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                    "square_errors": errors,
                },
            )
            raise SquareAPIError(
                detail or f"Square API returned {response.status_code}",
                status_code=response.status_code,
                square_errors=errors,
            )

        logger.info(
            "Square operation completed",
            extra={**log_context, "duration_ms": duration_ms},
        )
        return data
