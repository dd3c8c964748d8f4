"""
Django admin configuration for authentication models.
"""

from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from authentication.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin configuration for Discord-identified users."""

    list_display = (
        "discord_username",
        "discord_id",
        "minecraft_username",
        "email",
        "is_staff",
        "date_joined",
    )
    list_filter = ("is_active", "is_staff", "is_superuser", "date_joined")
    search_fields = ("discord_id", "discord_username", "minecraft_username", "email")
    ordering = ("-date_joined",)

    fieldsets = (
        (None, {"fields": ("discord_id", "discord_username", "password")}),
        ("Delivery", {"fields": ("minecraft_username", "email")}),
        ("Status", {"fields": ("is_active", "is_staff", "is_superuser")}),
        ("Permissions", {"fields": ("groups", "user_permissions")}),
        ("Important dates", {"fields": ("date_joined", "last_login")}),
    )

    add_fieldsets = (
        (
            None,
            {
                "classes": ("wide",),
                "fields": ("discord_id", "password1", "password2"),
            },
        ),
    )

    readonly_fields = ("date_joined", "last_login")
