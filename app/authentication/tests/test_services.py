"""
Tests for DiscordAuthService.
"""

from unittest.mock import MagicMock

import pytest

from authentication.models import User
from authentication.services import DiscordAuthService
from authentication.tests.factories import UserFactory
from toolkit.services.discord import DiscordAPIError


def _discord(profile=None, error=None):
    client = MagicMock()
    if error is not None:
        client.get_current_user.side_effect = error
    else:
        client.get_current_user.return_value = profile
    return client


@pytest.mark.django_db
class TestDiscordLogin:
    def test_first_login_creates_user(self):
        discord = _discord(
            {"id": "1234", "username": "alex", "global_name": "Alex", "email": "alex@example.com"}
        )

        result = DiscordAuthService.login("token", discord)

        assert result.success
        user = User.objects.get(discord_id="1234")
        assert result.data == user
        assert user.discord_username == "Alex"
        assert user.email == "alex@example.com"
        assert not user.has_usable_password()
        discord.get_current_user.assert_called_once_with("token")

    def test_repeat_login_refreshes_handle_and_keeps_delivery_details(self):
        user = UserFactory(discord_id="1234", discord_username="old", minecraft_username="Alex_MC")
        discord = _discord({"id": "1234", "username": "renamed"})

        result = DiscordAuthService.login("token", discord)

        user.refresh_from_db()
        assert result.data.pk == user.pk
        assert user.discord_username == "renamed"
        assert user.minecraft_username == "Alex_MC"
        # No email from Discord keeps the stored one
        assert user.email is not None
        assert User.objects.count() == 1

    def test_rejected_token_fails(self):
        discord = _discord(error=DiscordAPIError("401 Unauthorized", status_code=401))

        result = DiscordAuthService.login("bad", discord)

        assert not result.success
        assert result.error_code == "DISCORD_AUTH_FAILED"
        assert User.objects.count() == 0

    def test_profile_without_id_fails(self):
        result = DiscordAuthService.login("token", _discord({"username": "ghost"}))

        assert result.error_code == "DISCORD_AUTH_FAILED"

    def test_disabled_account_is_refused(self):
        UserFactory(discord_id="1234", is_active=False)

        result = DiscordAuthService.login("token", _discord({"id": "1234", "username": "x"}))

        assert not result.success
        assert result.error_code == "ACCOUNT_DISABLED"
