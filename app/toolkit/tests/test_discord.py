"""
Tests for the Discord REST client.
"""

from unittest.mock import MagicMock

import pytest
import requests
from django.test import override_settings

from toolkit.services.discord import GUILD_TEXT_CHANNEL, DiscordAPIError, DiscordClient


def make_response(status_code=200, json_data=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.content = b"{}" if json_data is not None else b""
    response.json.return_value = json_data
    response.text = text
    return response


@pytest.fixture
def session():
    return MagicMock(spec=requests.Session)


@pytest.fixture
def discord(session):
    return DiscordClient(
        bot_token="bot-token",
        api_base_url="https://discord.test/api/v10/",
        timeout=5,
        session=session,
    )


class TestDiscordClient:
    @override_settings(
        DISCORD_BOT_TOKEN="from-settings",
        DISCORD_API_BASE_URL="https://discord.test/api/v10",
        DISCORD_API_TIMEOUT_SECONDS=3,
    )
    def test_from_settings(self):
        client = DiscordClient.from_settings()

        assert client.bot_token == "from-settings"
        assert client.timeout == 3
        assert client.is_configured

    def test_create_text_channel(self, discord, session):
        session.request.return_value = make_response(json_data={"id": "channel-1"})
        overwrites = [{"id": "guild-1", "type": 0, "deny": "1024"}]

        channel = discord.create_text_channel(
            "guild-1", "ticket-steve", parent_id="cat-1", permission_overwrites=overwrites
        )

        assert channel == {"id": "channel-1"}
        method, url = session.request.call_args.args
        kwargs = session.request.call_args.kwargs
        assert method == "POST"
        assert url == "https://discord.test/api/v10/guilds/guild-1/channels"
        assert kwargs["headers"] == {"Authorization": "Bot bot-token"}
        assert kwargs["timeout"] == 5
        assert kwargs["json"] == {
            "name": "ticket-steve",
            "type": GUILD_TEXT_CHANNEL,
            "parent_id": "cat-1",
            "permission_overwrites": overwrites,
        }

    def test_send_message(self, discord, session):
        session.request.return_value = make_response(json_data={"id": "msg-1"})

        discord.send_message("channel-1", embeds=[{"title": "Order"}])

        assert session.request.call_args.args[1].endswith("/channels/channel-1/messages")
        assert session.request.call_args.kwargs["json"] == {"embeds": [{"title": "Order"}]}

    def test_add_member_role_no_content(self, discord, session):
        session.request.return_value = make_response(status_code=204)

        assert discord.add_member_role("guild-1", "user-1", "role-1") is None
        assert session.request.call_args.args == (
            "PUT",
            "https://discord.test/api/v10/guilds/guild-1/members/user-1/roles/role-1",
        )

    def test_bot_call_without_token(self, session):
        client = DiscordClient(session=session)

        with pytest.raises(DiscordAPIError) as exc_info:
            client.send_message("channel-1", content="hi")

        assert exc_info.value.error_code == "DISCORD_NOT_CONFIGURED"
        session.request.assert_not_called()

    def test_execute_webhook_sends_no_bot_token(self, session):
        client = DiscordClient(session=session)
        session.request.return_value = make_response(status_code=204)

        client.execute_webhook("https://discord.test/api/webhooks/1/abc", {"content": "Restock"})

        assert session.request.call_args.kwargs["headers"] is None

    def test_get_current_user_uses_bearer_token(self, discord, session):
        session.request.return_value = make_response(json_data={"id": "42", "username": "steve"})

        user = discord.get_current_user("oauth-token")

        assert user["username"] == "steve"
        assert session.request.call_args.kwargs["headers"] == {
            "Authorization": "Bearer oauth-token"
        }

    def test_error_status(self, discord, session):
        session.request.return_value = make_response(status_code=403, text="Missing Access")

        with pytest.raises(DiscordAPIError) as exc_info:
            discord.send_message("channel-1", content="hi")

        assert exc_info.value.status_code == 403
        assert "Missing Access" in exc_info.value.message

    def test_connection_error(self, discord, session):
        session.request.side_effect = requests.Timeout("timed out")

        with pytest.raises(DiscordAPIError) as exc_info:
            discord.send_message("channel-1", content="hi")

        assert exc_info.value.status_code is None
