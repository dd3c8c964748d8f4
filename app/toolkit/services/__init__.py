"""
Service classes for toolkit app.

This package contains clients for outbound integrations:
- EmailService: Email sending with template support
- DiscordClient: Discord REST API (channels, roles, webhooks)

Usage:
    from toolkit.services import DiscordClient, EmailService
"""

from toolkit.services.discord import DiscordAPIError, DiscordClient
from toolkit.services.email import EmailService

__all__ = ["DiscordAPIError", "DiscordClient", "EmailService"]
