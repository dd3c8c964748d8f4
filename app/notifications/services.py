"""
Admin notification service layer.

Services:
    AdminNotificationService: create, read and clear administrator notifications

Usage:
    from notifications.services import AdminNotificationService

    AdminNotificationService.create(
        type=AdminNotificationType.PAYMENT_FAILED,
        title="Payment Failed",
        message="Order #1A2B3C4D payment failed",
        reference_id=str(order.id),
    )

    result = AdminNotificationService.mark_read(notification_id)
"""

from __future__ import annotations

from django.utils import timezone

from core.services import BaseService, ServiceResult
from notifications.models import AdminNotification


class AdminNotificationService(BaseService):
    """Administrator inbox operations."""

    @classmethod
    def create(
        cls,
        type: str,
        title: str,
        message: str,
        reference_id: str | None = None,
    ) -> AdminNotification:
        notification = AdminNotification.objects.create(
            type=type,
            title=title,
            message=message,
            reference_id=reference_id or "",
        )
        cls.get_logger().info(
            "Admin notification created",
            extra={
                "notification_id": notification.pk,
                "type": type,
                "reference_id": reference_id,
            },
        )
        return notification

    @classmethod
    def mark_read(cls, notification_id: int) -> ServiceResult[AdminNotification]:
        """
        Mark one notification read. Idempotent.
        """
        notification = AdminNotification.objects.filter(pk=notification_id).first()
        if notification is None:
            return ServiceResult.failure(
                "Notification not found",
                error_code="NOTIFICATION_NOT_FOUND",
            )

        notification.mark_read()
        return ServiceResult.success(notification)

    @classmethod
    def mark_all_read(cls) -> ServiceResult[int]:
        """
        Mark every unread notification read.

        Returns:
            ServiceResult with the number of notifications updated
        """
        now = timezone.now()
        count = AdminNotification.objects.unread().update(
            is_read=True,
            read_at=now,
            updated_at=now,
        )
        cls.get_logger().info("Admin notifications marked read", extra={"count": count})
        return ServiceResult.success(count)
