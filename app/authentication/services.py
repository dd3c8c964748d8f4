"""
Authentication services.

This module provides DiscordAuthService, which turns a Discord OAuth access
token into a local User. The storefront runs the OAuth redirect itself and
hands us the resulting access token.

Related files:
    - models.py: User
    - toolkit/services/discord.py: DiscordClient (/users/@me lookup)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from authentication.models import User
from core.services import BaseService, ServiceResult
from toolkit.services.discord import DiscordAPIError

if TYPE_CHECKING:
    from toolkit.services.discord import DiscordClient


class DiscordAuthService(BaseService):
    """
    Discord login flow.

    Usage:
        result = DiscordAuthService.login(access_token, DiscordClient.from_settings())
        if result.success:
            user = result.data
    """

    @classmethod
    def login(cls, access_token: str, discord: DiscordClient) -> ServiceResult[User]:
        """
        Resolve the token to a Discord user and upsert the local account.

        Username and email are refreshed on every login; the Minecraft
        username and staff flag are never touched here.

        Returns:
            ServiceResult with the User, or failure with DISCORD_AUTH_FAILED
            / ACCOUNT_DISABLED
        """
        logger = cls.get_logger()

        try:
            profile = discord.get_current_user(access_token)
        except DiscordAPIError as e:
            logger.warning(
                "Discord token exchange failed",
                extra={"status_code": e.status_code},
            )
            return ServiceResult.failure(
                "Discord authentication failed",
                error_code="DISCORD_AUTH_FAILED",
            )

        discord_id = profile.get("id")
        if not discord_id:
            return ServiceResult.failure(
                "Discord authentication failed",
                error_code="DISCORD_AUTH_FAILED",
            )

        username = profile.get("global_name") or profile.get("username") or ""
        email = profile.get("email") or None

        with cls.atomic():
            user = User.objects.select_for_update().filter(discord_id=discord_id).first()
            if user is None:
                user = User.objects.create_user(
                    discord_id=discord_id,
                    discord_username=username,
                    email=email,
                )
                logger.info("Created user from Discord login", extra={"user_id": str(user.id)})
            else:
                user.discord_username = username
                if email:
                    user.email = email
                user.save(update_fields=["discord_username", "email", "updated_at"])

        if not user.is_active:
            return ServiceResult.failure(
                "This account has been disabled",
                error_code="ACCOUNT_DISABLED",
            )

        return ServiceResult.success(user)
