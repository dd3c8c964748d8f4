"""
Authentication views.

This module provides API views for:
- Discord login (Discord OAuth token -> JWT pair)
- Profile management (delivery details)

Related files:
    - serializers.py: Request/response serialization
    - services.py: DiscordAuthService
    - urls.py: URL routing

Note:
    Token refresh is served by simplejwt's TokenRefreshView at
    /api/v1/auth/token/refresh/.
"""

from django.contrib.auth import user_logged_in
from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.tokens import RefreshToken

from authentication.serializers import (
    DiscordLoginSerializer,
    ProfileUpdateSerializer,
    TokenPairResponseSerializer,
    UserSerializer,
)
from authentication.services import DiscordAuthService
from toolkit.services.discord import DiscordClient


class DiscordLoginView(APIView):
    """
    Exchange a Discord OAuth access token for a JWT pair.

    URL: /api/v1/auth/discord/

    No authentication required (this IS the login).
    """

    permission_classes = [AllowAny]
    authentication_classes = []

    @extend_schema(
        summary="Sign in with Discord",
        tags=["Auth"],
        request=DiscordLoginSerializer,
        responses={
            200: TokenPairResponseSerializer,
            401: OpenApiResponse(description="Discord rejected the token"),
        },
    )
    def post(self, request):
        serializer = DiscordLoginSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        result = DiscordAuthService.login(
            serializer.validated_data["access_token"],
            DiscordClient.from_settings(),
        )
        if not result.success:
            return Response(result.to_response(), status=status.HTTP_401_UNAUTHORIZED)

        user = result.data
        refresh = RefreshToken.for_user(user)
        user_logged_in.send(sender=user.__class__, request=request, user=user)

        return Response(
            {
                "access": str(refresh.access_token),
                "refresh": str(refresh),
                "user": UserSerializer(user).data,
            }
        )


class ProfileView(APIView):
    """
    GET: Current user
    PATCH: Update Minecraft username / receipt email

    URL: /api/v1/auth/profile/
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(summary="Get current user", tags=["Auth"], responses={200: UserSerializer})
    def get(self, request):
        return Response(UserSerializer(request.user).data)

    @extend_schema(
        summary="Update delivery details",
        tags=["Auth"],
        request=ProfileUpdateSerializer,
        responses={200: UserSerializer},
    )
    def patch(self, request):
        serializer = ProfileUpdateSerializer(request.user, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        user = serializer.save()
        return Response(UserSerializer(user).data)
