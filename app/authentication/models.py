"""
Authentication models.

This module defines the store's user model. Customers sign in with Discord,
so the Discord user id is the login identifier; the Minecraft username is
what purchased items are delivered to.

Related files:
    - managers.py: Custom user manager for Discord-id based creation
    - services.py: DiscordAuthService login flow
"""

from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin
from django.db import models

from authentication.managers import UserManager
from core.model_mixins import UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, AbstractBaseUser, PermissionsMixin):
    """
    Store customer or administrator.

    Fields:
        discord_id: Discord snowflake, unique, used for login
        discord_username: Display handle at last login
        email: Receipt address (Discord may not share one)
        minecraft_username: Default in-game delivery target
        is_active: Whether the user account is active
        is_staff: Store administrator (admin API + Django admin)
        date_joined: When the user account was created
        updated_at: When the user record was last modified

    Usage:
        user = User.objects.create_user(
            discord_id="80351110224678912",
            discord_username="steve",
        )
    """

    discord_id = models.CharField(
        max_length=32,
        unique=True,
        help_text="Discord user id (snowflake), primary login identifier",
    )
    discord_username = models.CharField(
        max_length=100,
        blank=True,
        default="",
        help_text="Discord username at last login",
    )
    email = models.EmailField(
        max_length=254,
        null=True,
        blank=True,
        help_text="Email address for order receipts",
    )
    minecraft_username = models.CharField(
        max_length=16,
        blank=True,
        default="",
        help_text="Default Minecraft account for deliveries",
    )

    is_active = models.BooleanField(
        default=True,
        help_text="Whether this user account is active. Deselect instead of deleting.",
    )
    is_staff = models.BooleanField(
        default=False,
        help_text="Whether the user is a store administrator.",
    )

    date_joined = models.DateTimeField(
        auto_now_add=True,
        help_text="When the user account was created",
    )
    updated_at = models.DateTimeField(
        auto_now=True,
        help_text="When the user record was last modified",
    )

    USERNAME_FIELD = "discord_id"
    REQUIRED_FIELDS = []

    objects = UserManager()

    class Meta:
        verbose_name = "user"
        verbose_name_plural = "users"
        ordering = ["-date_joined"]

    def __str__(self):
        return self.discord_username or self.discord_id

    def get_full_name(self):
        return self.discord_username or self.discord_id

    def get_short_name(self):
        return self.discord_username or self.discord_id
