"""
Serializers for authentication.

This module provides DRF serializers for:
- User model (read operations)
- Profile updates (delivery details)
- Discord login (token exchange request/response)

Related files:
    - models.py: User model
    - views.py: Views that use these serializers
"""

import re

from rest_framework import serializers

from authentication.models import User

MINECRAFT_USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_]{3,16}$")


class UserSerializer(serializers.ModelSerializer):
    """Serializer for User model (read operations)."""

    class Meta:
        model = User
        fields = [
            "id",
            "discord_id",
            "discord_username",
            "email",
            "minecraft_username",
            "is_staff",
            "date_joined",
        ]
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """
    Serializer for updating the current user's delivery details.

    The Minecraft username pre-fills checkout; the email receives receipts.
    """

    class Meta:
        model = User
        fields = ["minecraft_username", "email"]
        extra_kwargs = {"email": {"required": False, "allow_null": True}}

    def validate_minecraft_username(self, value):
        value = value.strip()
        if value and not MINECRAFT_USERNAME_PATTERN.match(value):
            raise serializers.ValidationError(
                "Minecraft usernames are 3-16 characters: letters, numbers, underscores."
            )
        return value


class DiscordLoginSerializer(serializers.Serializer):
    """Request body for exchanging a Discord OAuth token."""

    access_token = serializers.CharField(
        help_text="Discord OAuth2 access token with the identify scope",
    )


class TokenPairResponseSerializer(serializers.Serializer):
    """JWT pair returned by the login endpoint."""

    access = serializers.CharField()
    refresh = serializers.CharField()
    user = UserSerializer()
