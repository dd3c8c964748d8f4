"""
Notification models.

AdminNotification is the store owner's inbox. Rows are written by the order
lifecycle (new orders, failed payments) and read from the admin API.

Usage:
    from notifications.models import AdminNotification, AdminNotificationType

    AdminNotification.objects.create(
        type=AdminNotificationType.NEW_ORDER,
        title="New Order Received",
        message="Order #1A2B3C4D from steve - $12.50",
        reference_id=str(order.id),
    )
"""

from __future__ import annotations

from django.db import models
from django.utils import timezone

from core.models import BaseModel


class AdminNotificationType(models.TextChoices):
    NEW_ORDER = "new_order", "New order"
    PAYMENT_FAILED = "payment_failed", "Payment failed"
    SYSTEM = "system", "System"


class AdminNotificationQuerySet(models.QuerySet):
    def unread(self):
        return self.filter(is_read=False)


class AdminNotification(BaseModel):
    """
    A notification for store administrators.

    Fields:
        type: What happened
        title: Short headline
        message: Human readable detail
        reference_id: Id of the related object (usually an order id)
        is_read: Whether an administrator has seen it
        read_at: When it was marked read
    """

    type = models.CharField(
        max_length=32,
        choices=AdminNotificationType.choices,
        db_index=True,
    )
    title = models.CharField(max_length=200)
    message = models.TextField()
    reference_id = models.CharField(max_length=64, blank=True, default="", db_index=True)

    is_read = models.BooleanField(default=False, db_index=True)
    read_at = models.DateTimeField(null=True, blank=True)

    objects = AdminNotificationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        verbose_name = "Admin Notification"
        verbose_name_plural = "Admin Notifications"

    def __str__(self) -> str:
        return f"[{self.type}] {self.title}"

    def mark_read(self) -> None:
        """Mark as read and save. Already-read notifications keep their read_at."""
        if self.is_read:
            return
        self.is_read = True
        self.read_at = timezone.now()
        self.save(update_fields=["is_read", "read_at", "updated_at"])
