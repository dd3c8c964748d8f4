"""
Authentication application.

Customers sign in with Discord. A Discord OAuth access token obtained by the
storefront is exchanged for a JWT pair that authenticates every other API
call.

Key components:
    - User model: Discord-id based user
    - DiscordAuthService: Exchange a Discord token for a local user
    - ProfileView: Read and update delivery details

Usage:
    from authentication.models import User
    from authentication.services import DiscordAuthService
"""
