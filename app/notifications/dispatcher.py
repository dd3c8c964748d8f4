"""
Post-purchase side effects.

Runs once per order, after the completion guard has been won and the
transaction has committed. Each side effect is an independent task: one
failing (Discord down, SMTP refusing) never stops the others and never
reaches the webhook response.

Side effects, in order:
    admin_notification     AdminNotification(type=new_order)
    discord_ticket         private ticket channel + order embed
    customer_role          grant the customer role in the guild
    purchase_announcement  embed to the purchase announcement webhook
    email_receipt          HTML + text receipt

Usage:
    from notifications.dispatcher import SideEffectDispatcher

    dispatcher = SideEffectDispatcher.from_settings()
    results = dispatcher.dispatch(order)

    # Tests pass their own client
    dispatcher = SideEffectDispatcher(discord=mock_client, config=config)
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from django.conf import settings
from django.utils import timezone

from notifications.models import AdminNotificationType
from notifications.services import AdminNotificationService
from toolkit.services.discord import (
    OVERWRITE_MEMBER,
    OVERWRITE_ROLE,
    VIEW_CHANNEL,
    DiscordClient,
)
from toolkit.services.email import EmailService

if TYPE_CHECKING:
    from typing import Any

    from orders.models import Order

logger = logging.getLogger(__name__)

COLOR_TICKET = 0x5865F2
COLOR_PURCHASE = 0x57F287

# Discord rejects embed field values longer than this
EMBED_FIELD_LIMIT = 1024

RECEIPT_TEMPLATE = "notifications/email/order_receipt"


class SideEffectStatus(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class SideEffectResult:
    """
    Outcome of one side effect.

    Attributes:
        name: Side effect name
        status: succeeded, failed or skipped
        error: Failure message, or the reason it was skipped
    """

    name: str
    status: SideEffectStatus
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == SideEffectStatus.SUCCEEDED


class SkipSideEffect(Exception):
    """Raised by a side effect that does not apply to this order."""


class SideEffectError(Exception):
    """Raised by a side effect whose target reported failure without raising."""


@dataclass(frozen=True)
class SideEffect:
    name: str
    run: Callable[[Order], None]


@dataclass(frozen=True)
class DispatcherConfig:
    """Discord ids and URLs the side effects need. Blank means not configured."""

    guild_id: str = ""
    owner_id: str = ""
    ticket_category_id: str = ""
    customer_role_id: str = ""
    announcement_webhook_url: str = ""
    store_name: str = "DonutMC Store"

    @classmethod
    def from_settings(cls) -> DispatcherConfig:
        return cls(
            guild_id=settings.DISCORD_GUILD_ID,
            owner_id=settings.DISCORD_OWNER_ID,
            ticket_category_id=settings.DISCORD_TICKET_CATEGORY_ID,
            customer_role_id=settings.DISCORD_CUSTOMER_ROLE_ID,
            announcement_webhook_url=settings.DISCORD_WEBHOOK_URL,
            store_name=settings.STORE_NAME,
        )


def ticket_channel_name(username: str) -> str:
    """``ticket-<handle>``: lower-cased, anything outside [a-z0-9] becomes '-'."""
    return "ticket-" + re.sub(r"[^a-z0-9]", "-", (username or "customer").lower())


def _dollars(cents: int) -> str:
    return f"${cents / 100:.2f}"


def _items_list(order: Order) -> str:
    lines = [
        f"• {item.title} x{item.quantity} - {_dollars(item.line_total_cents)}"
        for item in order.items.all()
    ]
    text = "\n".join(lines) or "No items"
    if len(text) > EMBED_FIELD_LIMIT:
        text = text[: EMBED_FIELD_LIMIT - 1] + "…"
    return text


def _buyer_discord_id(order: Order) -> str:
    if order.discord_id:
        return order.discord_id
    return order.user.discord_id if order.user else ""


def _buyer_username(order: Order) -> str:
    return order.user.discord_username if order.user else ""


class SideEffectDispatcher:
    """
    Runs the post-purchase side effects for a completed order.

    The Discord client is injected; nothing here reads a module-level client.
    """

    def __init__(self, discord: DiscordClient, config: DispatcherConfig | None = None):
        self.discord = discord
        self.config = config or DispatcherConfig()

    @classmethod
    def from_settings(cls) -> SideEffectDispatcher:
        return cls(discord=DiscordClient.from_settings(), config=DispatcherConfig.from_settings())

    def side_effects(self) -> list[SideEffect]:
        return [
            SideEffect("admin_notification", self.notify_admin),
            SideEffect("discord_ticket", self.open_ticket),
            SideEffect("customer_role", self.grant_customer_role),
            SideEffect("purchase_announcement", self.announce_purchase),
            SideEffect("email_receipt", self.send_receipt),
        ]

    def dispatch(self, order: Order) -> list[SideEffectResult]:
        """
        Run every side effect for ``order``.

        Never raises; every failure is logged and reported in the results.
        """
        results: list[SideEffectResult] = []
        log_context = {"order_id": str(order.id)}

        for effect in self.side_effects():
            try:
                effect.run(order)
            except SkipSideEffect as e:
                results.append(SideEffectResult(effect.name, SideEffectStatus.SKIPPED, str(e)))
                logger.info(
                    f"Side effect skipped: {effect.name}",
                    extra={**log_context, "reason": str(e)},
                )
            except Exception as e:
                results.append(SideEffectResult(effect.name, SideEffectStatus.FAILED, str(e)))
                logger.exception(
                    f"Side effect failed: {effect.name}",
                    extra=log_context,
                )
            else:
                results.append(SideEffectResult(effect.name, SideEffectStatus.SUCCEEDED))

        logger.info(
            "Side effects dispatched",
            extra={
                **log_context,
                "results": {result.name: result.status.value for result in results},
            },
        )
        return results

    # =========================================================================
    # Side effects
    # =========================================================================

    def notify_admin(self, order: Order) -> None:
        AdminNotificationService.create(
            type=AdminNotificationType.NEW_ORDER,
            title="New Order Received",
            message=(
                f"Order #{order.short_id} from {_buyer_username(order) or 'Unknown'}"
                f" - {_dollars(order.total_cents)}"
            ),
            reference_id=str(order.id),
        )

    def open_ticket(self, order: Order) -> None:
        discord_id = self._require_discord_buyer(order)
        if not (self.config.guild_id and self.config.owner_id):
            raise SkipSideEffect("Discord guild or owner not configured")

        channel = self.discord.create_text_channel(
            guild_id=self.config.guild_id,
            name=ticket_channel_name(_buyer_username(order)),
            topic=f"Order #{order.short_id} for {order.minecraft_username}",
            parent_id=self.config.ticket_category_id or None,
            permission_overwrites=[
                {"id": self.config.guild_id, "type": OVERWRITE_ROLE, "deny": str(VIEW_CHANNEL)},
                {"id": discord_id, "type": OVERWRITE_MEMBER, "allow": str(VIEW_CHANNEL)},
                {"id": self.config.owner_id, "type": OVERWRITE_MEMBER, "allow": str(VIEW_CHANNEL)},
            ],
        )

        self.discord.send_message(
            channel["id"],
            embeds=[
                {
                    "title": "🎟️ New Order Ticket",
                    "description": f"Thank you for your purchase, <@{discord_id}>!",
                    "color": COLOR_TICKET,
                    "fields": [
                        {"name": "📦 Order ID", "value": str(order.id), "inline": True},
                        {"name": "💰 Total", "value": _dollars(order.total_cents), "inline": True},
                        {"name": "🛒 Items Purchased", "value": _items_list(order), "inline": False},
                    ],
                    "footer": {"text": "A staff member will assist you shortly."},
                    "timestamp": timezone.now().isoformat(),
                }
            ],
        )

    def grant_customer_role(self, order: Order) -> None:
        discord_id = self._require_discord_buyer(order)
        if not (self.config.guild_id and self.config.customer_role_id):
            raise SkipSideEffect("Discord customer role not configured")

        self.discord.add_member_role(
            self.config.guild_id, discord_id, self.config.customer_role_id
        )

    def announce_purchase(self, order: Order) -> None:
        if not self.config.announcement_webhook_url:
            raise SkipSideEffect("Purchase announcement webhook not configured")
        discord_id = _buyer_discord_id(order)
        if not discord_id:
            raise SkipSideEffect("Buyer has no Discord id")

        self.discord.execute_webhook(
            self.config.announcement_webhook_url,
            {
                "embeds": [
                    {
                        "title": "💰 New Purchase Completed",
                        "description": "A new order has been completed!",
                        "color": COLOR_PURCHASE,
                        "fields": [
                            {
                                "name": "👤 Customer",
                                "value": f"<@{discord_id}> ({_buyer_username(order)})",
                                "inline": True,
                            },
                            {
                                "name": "📦 Order ID",
                                "value": f"`{order.short_id}`",
                                "inline": True,
                            },
                            {
                                "name": "💵 Total Amount",
                                "value": f"**{_dollars(order.total_cents)}**",
                                "inline": True,
                            },
                            {
                                "name": "🛒 Items Purchased",
                                "value": _items_list(order),
                                "inline": False,
                            },
                        ],
                        "footer": {"text": self.config.store_name},
                        "timestamp": timezone.now().isoformat(),
                    }
                ]
            },
        )

    def send_receipt(self, order: Order) -> None:
        email = order.user.email if order.user else None
        if not email:
            raise SkipSideEffect("Buyer has no email address")

        context: dict[str, Any] = {
            "order": order,
            "items": [
                {
                    "title": item.title,
                    "quantity": item.quantity,
                    "line_total": _dollars(item.line_total_cents),
                }
                for item in order.items.all()
            ],
            "total": _dollars(order.total_cents),
            "store_name": self.config.store_name,
        }
        sent = EmailService.send(
            to=email,
            subject=f"Order Confirmation - {order.short_id}",
            template_name=RECEIPT_TEMPLATE,
            context=context,
        )
        if not sent:
            raise SideEffectError("Email backend rejected the receipt")

    def _require_discord_buyer(self, order: Order) -> str:
        discord_id = _buyer_discord_id(order)
        if not discord_id:
            raise SkipSideEffect("Buyer has no Discord id")
        if not self.discord.is_configured:
            raise SkipSideEffect("Discord bot token not configured")
        return discord_id
