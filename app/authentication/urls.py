"""
URL configuration for authentication app.

URL structure:
    /api/v1/auth/discord/         - Discord OAuth token -> JWT pair
    /api/v1/auth/token/refresh/   - Refresh an access token
    /api/v1/auth/profile/         - Current user (GET/PATCH)
"""

from django.urls import path
from rest_framework_simplejwt.views import TokenRefreshView

from authentication.views import DiscordLoginView, ProfileView

app_name = "authentication"

urlpatterns = [
    path("discord/", DiscordLoginView.as_view(), name="discord-login"),
    path("token/refresh/", TokenRefreshView.as_view(), name="token-refresh"),
    path("profile/", ProfileView.as_view(), name="profile"),
]
