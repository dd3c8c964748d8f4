"""
Catalog services.

StockLedger:
    The only code that mutates Product.stock for purchases. Decrements are
    one SQL statement each (``stock = GREATEST(stock - q, 0)``) so two
    orders completing at the same time can never lose an update.

CatalogSyncService:
    Mirrors provider catalogs into Product rows. Stripe pushes product and
    price events through webhooks; Square is pulled in full by a Celery task
    when it reports a catalog change. Both can also be run on demand by an
    administrator.

Usage:
    from catalog.services import CatalogSyncService, StockLedger

    StockLedger.decrement(product_id, 2)

    CatalogSyncService.apply_stripe_product(
        event_object,
        event_type="product.updated",
        discord=DiscordClient.from_settings(),
    )
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import TYPE_CHECKING

from django.conf import settings
from django.db.models import F, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from catalog.exceptions import InvalidStockQuantityError
from catalog.models import DEFAULT_CATEGORY, UNTRACKED_STOCK, Product
from core.services import BaseService
from payments.adapters import SquareAdapter, StripeAdapter
from toolkit.services.discord import DiscordAPIError

if TYPE_CHECKING:
    from typing import Any
    from uuid import UUID

    from toolkit.services.discord import DiscordClient

# Embed colours
COLOR_RESTOCK = 0x57F287
COLOR_NEW_PRODUCT = 0x5865F2


def _validate_quantity(quantity, *, allow_zero: bool = False) -> int:
    # bool is an int subclass; True is not a quantity
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidStockQuantityError(
            f"Stock quantity must be an integer, got {quantity!r}",
            details={"quantity": repr(quantity)},
        )
    if quantity < 0 or (quantity == 0 and not allow_zero):
        raise InvalidStockQuantityError(
            f"Stock quantity must be {'non-negative' if allow_zero else 'positive'}, got {quantity}",
            details={"quantity": quantity},
        )
    return quantity


def _parse_int(value, default: int) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


class StockLedger(BaseService):
    """
    Per-product stock counters.

    Invariants:
        - stock never goes below zero
        - a decrement is a single UPDATE, never read-modify-write
    """

    @classmethod
    def decrement(cls, product_id: UUID | str, quantity: int) -> bool:
        """
        Atomically reduce stock by ``quantity``, clamping at zero.

        Oversell (quantity greater than remaining stock) is clamped, not
        rejected: the payment has already been taken by the time this runs.

        Args:
            product_id: Product primary key
            quantity: Positive integer

        Returns:
            True if a product row was updated, False if the product is gone

        Raises:
            InvalidStockQuantityError: quantity is not a positive int
        """
        _validate_quantity(quantity)

        updated = Product.objects.filter(pk=product_id).update(
            stock=Greatest(F("stock") - quantity, Value(0)),
            updated_at=timezone.now(),
        )

        if not updated:
            cls.get_logger().warning(
                "Stock decrement for unknown product",
                extra={"product_id": str(product_id), "quantity": quantity},
            )
            return False

        cls.get_logger().info(
            "Stock decremented",
            extra={"product_id": str(product_id), "quantity": quantity},
        )
        return True

    @classmethod
    def set_stock(cls, product_id: UUID | str, new_stock: int) -> bool:
        """
        Set stock to an absolute value (administrative restock).

        Raises:
            InvalidStockQuantityError: new_stock is negative or not an int
        """
        _validate_quantity(new_stock, allow_zero=True)

        updated = Product.objects.filter(pk=product_id).update(
            stock=new_stock,
            updated_at=timezone.now(),
        )
        cls.get_logger().info(
            "Stock set",
            extra={"product_id": str(product_id), "stock": new_stock},
        )
        return bool(updated)


@dataclass
class SyncSummary:
    synced: int = 0
    created: int = 0
    updated: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return asdict(self)

    def log_context(self) -> dict[str, int]:
        # "created" is a reserved LogRecord attribute
        return {f"sync_{key}": value for key, value in asdict(self).items()}


class CatalogSyncService(BaseService):
    """
    Provider catalog mirroring.
    """

    # =========================================================================
    # Stripe webhook events
    # =========================================================================

    @classmethod
    def apply_stripe_product(
        cls,
        product_data: dict[str, Any],
        event_type: str,
        discord: DiscordClient | None = None,
    ) -> Product:
        """
        Upsert a Product from a Stripe product object.

        Metadata conventions (all optional, string values):
            category:   storefront tab, default "items"
            is_active:  "true"/"false", overrides the Stripe active flag
            stock:      units available, default 999
            sort_order: integer position

        A ``product.updated`` that raises stock from a positive value posts a
        restock announcement when ``discord`` is given.
        """
        logger = cls.get_logger()
        stripe_product_id = product_data["id"]
        metadata = product_data.get("metadata") or {}

        if metadata.get("is_active") not in (None, ""):
            is_active = str(metadata["is_active"]).lower() == "true"
        else:
            is_active = bool(product_data.get("active"))

        new_stock = max(0, _parse_int(metadata.get("stock"), UNTRACKED_STOCK))
        images = product_data.get("images") or []

        fields = {
            "title": product_data.get("name") or "Unnamed Product",
            "description": product_data.get("description") or "",
            "image_url": images[0] if images else None,
            "category": (metadata.get("category") or DEFAULT_CATEGORY).lower(),
            "is_active": is_active,
            "stock": new_stock,
            "sort_order": _parse_int(metadata.get("sort_order"), 0),
        }

        with cls.atomic():
            product = (
                Product.objects.select_for_update()
                .filter(stripe_product_id=stripe_product_id)
                .first()
            )
            if product is None:
                is_new = True
                old_stock = 0
                product = Product.objects.create(
                    stripe_product_id=stripe_product_id,
                    price_cents=0,
                    **fields,
                )
                should_announce = is_active and 0 < new_stock < UNTRACKED_STOCK
            else:
                is_new = False
                old_stock = product.stock
                for name, value in fields.items():
                    setattr(product, name, value)
                product.save()
                should_announce = new_stock > old_stock > 0

        logger.info(
            "Stripe product applied",
            extra={
                "stripe_product_id": stripe_product_id,
                "product_id": str(product.id),
                "is_new": is_new,
                "event_type": event_type,
            },
        )

        if should_announce and event_type == "product.updated" and discord is not None:
            cls.announce_restock(product, old_stock, is_new, discord)

        return product

    @classmethod
    def deactivate_stripe_product(cls, stripe_product_id: str) -> int:
        """Hide a product deleted in Stripe. Order history keeps the row."""
        updated = Product.objects.filter(stripe_product_id=stripe_product_id).update(
            is_active=False,
            updated_at=timezone.now(),
        )
        cls.get_logger().info(
            "Stripe product deactivated",
            extra={"stripe_product_id": stripe_product_id, "rows": updated},
        )
        return updated

    @classmethod
    def apply_stripe_price(cls, price_data: dict[str, Any]) -> Product | None:
        """
        Record an active Stripe price on its product.

        A price can arrive before its product; in that case an inactive
        placeholder is created and filled in by the later product event.
        Inactive prices are ignored.
        """
        product_ref = price_data.get("product")
        stripe_product_id = (
            product_ref.get("id") if isinstance(product_ref, dict) else product_ref
        )
        if not stripe_product_id or not price_data.get("active"):
            return None

        price_cents = price_data.get("unit_amount") or 0

        with cls.atomic():
            product = (
                Product.objects.select_for_update()
                .filter(stripe_product_id=stripe_product_id)
                .first()
            )
            if product is None:
                product = Product.objects.create(
                    stripe_product_id=stripe_product_id,
                    title="Pending Product",
                    category=DEFAULT_CATEGORY,
                    price_cents=price_cents,
                    stripe_price_id=price_data["id"],
                    is_active=False,
                    stock=0,
                )
                cls.get_logger().info(
                    "Placeholder product created for early price",
                    extra={"stripe_product_id": stripe_product_id},
                )
            else:
                product.price_cents = price_cents
                product.stripe_price_id = price_data["id"]
                product.save(update_fields=["price_cents", "stripe_price_id", "updated_at"])

        return product

    # =========================================================================
    # Full syncs
    # =========================================================================

    @classmethod
    def sync_stripe_catalog(cls) -> SyncSummary:
        """
        Pull every active Stripe product and its current price.

        The product's ``default_price`` wins; otherwise the newest active
        price for that product is used.
        """
        products = StripeAdapter.list_active_products()
        prices = StripeAdapter.list_active_prices()

        prices_by_id = {price["id"]: price for price in prices}
        newest_by_product: dict[str, dict[str, Any]] = {}
        for price in prices:
            product_ref = price.get("product")
            key = product_ref.get("id") if isinstance(product_ref, dict) else product_ref
            current = newest_by_product.get(key)
            if current is None or price.get("created", 0) > current.get("created", 0):
                newest_by_product[key] = price

        known = set(
            Product.objects.filter(
                stripe_product_id__in=[p["id"] for p in products]
            ).values_list("stripe_product_id", flat=True)
        )

        summary = SyncSummary()
        for product_data in products:
            cls.apply_stripe_product(product_data, event_type="sync")

            default_price = product_data.get("default_price")
            if isinstance(default_price, dict):
                default_price = default_price.get("id")
            price = prices_by_id.get(default_price) or newest_by_product.get(product_data["id"])
            if price:
                cls.apply_stripe_price(price)

            summary.synced += 1
            if product_data["id"] in known:
                summary.updated += 1
            else:
                summary.created += 1

        cls.get_logger().info("Stripe catalog synced", extra=summary.log_context())
        return summary

    @classmethod
    def sync_square_catalog(cls) -> SyncSummary:
        """
        Pull the Square catalog into Product rows.

        Square items use the first variation's price. New items get untracked
        stock (999); existing stock is never overwritten by a sync. An
        existing image is kept when Square has none.
        """
        listing = SquareAdapter.list_catalog()
        summary = SyncSummary()

        for item in listing.items:
            item_data = item.get("item_data") or {}
            variations = item_data.get("variations") or []
            if not variations:
                summary.skipped += 1
                continue

            variation = variations[0]
            price_money = (variation.get("item_variation_data") or {}).get("price_money") or {}
            image_ids = item_data.get("image_ids") or []
            image_url = listing.image_urls.get(image_ids[0]) if image_ids else None

            fields = {
                "square_variation_id": variation.get("id"),
                "title": item_data.get("name") or "Unnamed Product",
                "description": item_data.get("description") or "",
                "price_cents": price_money.get("amount") or 0,
                "category": cls._square_category(item),
                "is_active": not item.get("is_deleted")
                and not item_data.get("is_deleted")
                and item_data.get("available_online") is not False,
            }
            if image_url:
                fields["image_url"] = image_url

            with cls.atomic():
                updated = Product.objects.filter(square_catalog_object_id=item["id"]).update(
                    **fields, updated_at=timezone.now()
                )
                if not updated:
                    Product.objects.create(
                        square_catalog_object_id=item["id"],
                        stock=UNTRACKED_STOCK,
                        **fields,
                    )

            summary.synced += 1
            if updated:
                summary.updated += 1
            else:
                summary.created += 1

        cls.get_logger().info("Square catalog synced", extra=summary.log_context())
        return summary

    @staticmethod
    def _square_category(item: dict[str, Any]) -> str:
        # custom_attribute_values is a map keyed by attribute key
        attributes = item.get("custom_attribute_values") or {}
        values = attributes.values() if isinstance(attributes, dict) else attributes
        for attribute in values:
            if isinstance(attribute, dict) and (attribute.get("name") or "").lower() == "category":
                value = attribute.get("string_value")
                if value:
                    return value.lower()
        return DEFAULT_CATEGORY

    # =========================================================================
    # Administration
    # =========================================================================

    @classmethod
    def update_stock(cls, product: Product, new_stock: int) -> Product:
        """
        Administrative stock change.

        Stripe-linked products get the new value written to their metadata
        first, so the next product.updated webhook agrees with us; a Stripe
        failure aborts the change.

        Raises:
            InvalidStockQuantityError: new_stock is negative
            StripeError: metadata update failed
        """
        _validate_quantity(new_stock, allow_zero=True)

        if product.stripe_product_id:
            StripeAdapter.update_product_metadata(
                product.stripe_product_id,
                {"stock": str(new_stock)},
            )

        StockLedger.set_stock(product.pk, new_stock)
        product.refresh_from_db(fields=["stock", "updated_at"])
        return product

    # =========================================================================
    # Announcements
    # =========================================================================

    @classmethod
    def announce_restock(
        cls,
        product: Product,
        old_stock: int,
        is_new: bool,
        discord: DiscordClient,
    ) -> bool:
        """
        Post a restock (or new product) embed to the restock webhook.

        Best effort: failures are logged and reported as False.
        """
        webhook_url = settings.DISCORD_RESTOCK_WEBHOOK_URL
        if not webhook_url:
            return False

        if is_new:
            stock_text = f"**{product.stock} available**"
        else:
            stock_text = (
                f"**{old_stock} → {product.stock}** (+{product.stock - old_stock})"
            )

        fields = [
            {"name": "💵 Price", "value": f"**${product.price:.2f}**", "inline": True},
            {"name": "📊 Stock", "value": stock_text, "inline": True},
            {"name": "🏷️ Category", "value": product.category, "inline": True},
        ]
        if product.description:
            fields.append(
                {"name": "📝 Description", "value": product.description[:200], "inline": False}
            )

        embed: dict[str, Any] = {
            "title": "🆕 New Product Available!" if is_new else "📦 Product Restocked!",
            "description": product.title,
            "color": COLOR_NEW_PRODUCT if is_new else COLOR_RESTOCK,
            "fields": fields,
            "footer": {"text": settings.STORE_NAME},
            "timestamp": timezone.now().isoformat(),
        }
        if product.image_url:
            embed["thumbnail"] = {"url": product.image_url}

        try:
            discord.execute_webhook(webhook_url, {"embeds": [embed]})
        except DiscordAPIError:
            cls.get_logger().exception(
                "Restock announcement failed",
                extra={"product_id": str(product.id)},
            )
            return False

        return True
