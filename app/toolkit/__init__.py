"""
Toolkit - Outbound integration clients.

This app wraps the non-payment services the store talks to:
- EmailService: Centralized email sending with templates
- DiscordClient: Discord REST API client for tickets, roles and webhooks

Key components:
    - services/email.py: EmailService class
    - services/discord.py: DiscordClient class

Usage:
    from toolkit.services.email import EmailService
    from toolkit.services.discord import DiscordClient

Note:
    This app has no models.
"""
