"""
Views for the admin notification API.

Endpoints (staff only):
    GET    /api/v1/notifications/admin/             - List (?is_read=true/false)
    POST   /api/v1/notifications/admin/{id}/read/   - Mark one read
    POST   /api/v1/notifications/admin/read-all/    - Mark all read
    DELETE /api/v1/notifications/admin/{id}/        - Delete one
"""

from __future__ import annotations

from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    extend_schema,
    extend_schema_view,
)
from rest_framework import mixins, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from core.permissions import IsStaffUser
from notifications.models import AdminNotification
from notifications.serializers import (
    AdminNotificationSerializer,
    MarkAllReadResponseSerializer,
)
from notifications.services import AdminNotificationService


@extend_schema_view(
    list=extend_schema(
        operation_id="list_admin_notifications",
        summary="List admin notifications",
        parameters=[
            OpenApiParameter(
                name="is_read",
                type=bool,
                location=OpenApiParameter.QUERY,
                description="Filter by read status (true/false)",
                required=False,
            ),
        ],
        tags=["Notifications - Admin"],
    ),
    destroy=extend_schema(
        operation_id="delete_admin_notification",
        summary="Delete admin notification",
        tags=["Notifications - Admin"],
    ),
)
class AdminNotificationViewSet(
    mixins.ListModelMixin,
    mixins.DestroyModelMixin,
    viewsets.GenericViewSet,
):
    """
    Store owner's inbox.

    Provides:
    - list: GET / - newest first, optional ?is_read filter
    - destroy: DELETE /{id}/
    - read: POST /{id}/read/
    - read_all: POST /read-all/
    """

    permission_classes = [IsStaffUser]
    serializer_class = AdminNotificationSerializer

    def get_queryset(self):
        queryset = AdminNotification.objects.all()

        is_read = self.request.query_params.get("is_read")
        if is_read is not None:
            queryset = queryset.filter(is_read=is_read.lower() == "true")

        return queryset

    @extend_schema(
        operation_id="mark_admin_notification_read",
        summary="Mark notification as read",
        responses={
            200: AdminNotificationSerializer,
            404: OpenApiResponse(description="Notification not found"),
        },
        tags=["Notifications - Admin"],
    )
    @action(detail=True, methods=["post"])
    def read(self, request, pk=None):
        result = AdminNotificationService.mark_read(pk)
        if not result.success:
            return Response({"detail": result.error}, status=status.HTTP_404_NOT_FOUND)

        return Response(self.get_serializer(result.data).data)

    @extend_schema(
        operation_id="mark_all_admin_notifications_read",
        summary="Mark all notifications as read",
        request=None,
        responses={200: MarkAllReadResponseSerializer},
        tags=["Notifications - Admin"],
    )
    @action(detail=False, methods=["post"], url_path="read-all")
    def read_all(self, request):
        result = AdminNotificationService.mark_all_read()
        return Response(MarkAllReadResponseSerializer({"marked_count": result.data}).data)
