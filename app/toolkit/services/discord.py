"""
Discord REST API client.

Thin wrapper over the Discord v10 HTTP API covering the calls the store
makes: ticket channels, channel messages, role grants, incoming webhooks
and the OAuth ``/users/@me`` lookup used at login.

Clients are constructed explicitly and passed to the code that needs them;
there is no module-level client.

Configuration:
    - DISCORD_BOT_TOKEN: Bot token used for guild operations
    - DISCORD_API_BASE_URL: API root (default https://discord.com/api/v10)
    - DISCORD_API_TIMEOUT_SECONDS: Per-request timeout

Usage:
    from toolkit.services.discord import DiscordClient

    client = DiscordClient.from_settings()
    channel = client.create_text_channel(
        guild_id="123",
        name="ticket-steve",
        parent_id="456",
        permission_overwrites=[...],
    )
    client.send_message(channel["id"], embeds=[embed])
"""

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING

import requests
from django.conf import settings

from core.exceptions import ExternalServiceError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://discord.com/api/v10"

# Channel type and permission bits from the Discord API reference
GUILD_TEXT_CHANNEL = 0
VIEW_CHANNEL = 1 << 10
OVERWRITE_ROLE = 0
OVERWRITE_MEMBER = 1


class DiscordAPIError(ExternalServiceError):
    """Raised when a Discord API call fails or is rejected."""

    default_error_code = "DISCORD_API_ERROR"

    def __init__(self, message: str, status_code: int | None = None, **kwargs):
        super().__init__(message, **kwargs)
        self.status_code = status_code


class DiscordClient:
    """
    Discord REST client bound to one bot token.

    Attributes:
        bot_token: Bot token sent as ``Authorization: Bot <token>``
        api_base_url: API root without trailing slash
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        bot_token: str = "",
        api_base_url: str = DEFAULT_API_BASE_URL,
        timeout: float = 10,
        session: requests.Session | None = None,
    ):
        self.bot_token = bot_token
        self.api_base_url = api_base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_settings(cls) -> DiscordClient:
        """Build a client from Django settings."""
        return cls(
            bot_token=settings.DISCORD_BOT_TOKEN,
            api_base_url=settings.DISCORD_API_BASE_URL,
            timeout=settings.DISCORD_API_TIMEOUT_SECONDS,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.bot_token)

    # =========================================================================
    # Bot operations
    # =========================================================================

    def create_text_channel(
        self,
        guild_id: str,
        name: str,
        parent_id: str | None = None,
        permission_overwrites: list[dict[str, Any]] | None = None,
        topic: str | None = None,
    ) -> dict[str, Any]:
        """
        Create a text channel in a guild.

        Returns:
            The created channel object (contains ``id``)
        """
        payload: dict[str, Any] = {"name": name, "type": GUILD_TEXT_CHANNEL}
        if parent_id:
            payload["parent_id"] = parent_id
        if permission_overwrites:
            payload["permission_overwrites"] = permission_overwrites
        if topic:
            payload["topic"] = topic

        return self._bot_request("POST", f"/guilds/{guild_id}/channels", json=payload)

    def send_message(
        self,
        channel_id: str,
        content: str | None = None,
        embeds: list[dict[str, Any]] | None = None,
    ) -> dict[str, Any]:
        """Post a message to a channel."""
        payload: dict[str, Any] = {}
        if content:
            payload["content"] = content
        if embeds:
            payload["embeds"] = embeds

        return self._bot_request(
            "POST", f"/channels/{channel_id}/messages", json=payload
        )

    def add_member_role(self, guild_id: str, user_id: str, role_id: str) -> None:
        """Grant a role to a guild member (204 on success)."""
        self._bot_request(
            "PUT", f"/guilds/{guild_id}/members/{user_id}/roles/{role_id}"
        )

    # =========================================================================
    # Non-bot operations
    # =========================================================================

    def execute_webhook(self, webhook_url: str, payload: dict[str, Any]) -> None:
        """
        Post a payload to an incoming webhook URL.

        Webhook URLs carry their own credentials; no bot token is sent.
        """
        self._request("POST", webhook_url, json=payload, operation="execute_webhook")

    def get_current_user(self, access_token: str) -> dict[str, Any]:
        """
        Resolve an OAuth2 user access token to the Discord user.

        Returns:
            User object with ``id``, ``username``, ``global_name``, ``email``
        """
        return self._request(
            "GET",
            f"{self.api_base_url}/users/@me",
            headers={"Authorization": f"Bearer {access_token}"},
            operation="get_current_user",
        )

    # =========================================================================
    # Transport
    # =========================================================================

    def _bot_request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        if not self.is_configured:
            raise DiscordAPIError(
                "Discord bot token is not configured",
                error_code="DISCORD_NOT_CONFIGURED",
            )

        return self._request(
            method,
            f"{self.api_base_url}{path}",
            headers={"Authorization": f"Bot {self.bot_token}"},
            operation=f"{method} {path}",
            **kwargs,
        )

    def _request(
        self,
        method: str,
        url: str,
        *,
        operation: str,
        headers: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        start_time = time.monotonic()

        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=json,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(
                f"Discord request failed: {operation}",
                extra={"operation": operation, "error": str(e)},
            )
            raise DiscordAPIError(f"Discord request failed: {e}") from e

        duration_ms = (time.monotonic() - start_time) * 1000

        if not response.ok:
            logger.warning(
                f"Discord API error: {operation}",
                extra={
                    "operation": operation,
                    "status_code": response.status_code,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise DiscordAPIError(
                f"Discord API returned {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )

        logger.debug(
            f"Discord API call succeeded: {operation}",
            extra={"operation": operation, "duration_ms": round(duration_ms, 2)},
        )

        if response.status_code == 204 or not response.content:
            return {}
        return response.json()
