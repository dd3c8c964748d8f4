"""
Tests for AdminNotificationService.
"""

import pytest

from notifications.models import AdminNotification, AdminNotificationType
from notifications.services import AdminNotificationService
from notifications.tests.factories import AdminNotificationFactory


@pytest.mark.django_db
class TestAdminNotificationService:
    def test_create(self):
        notification = AdminNotificationService.create(
            type=AdminNotificationType.SYSTEM,
            title="Catalog sync failed",
            message="Square returned 503",
        )

        assert notification.pk is not None
        assert notification.reference_id == ""
        assert notification.is_read is False

    def test_mark_read(self, unread_notification):
        result = AdminNotificationService.mark_read(unread_notification.pk)

        assert result.success
        assert result.data.is_read is True

    def test_mark_read_unknown(self):
        result = AdminNotificationService.mark_read(999999)

        assert not result.success
        assert result.error_code == "NOTIFICATION_NOT_FOUND"

    def test_mark_all_read_counts_only_unread(self, read_notification):
        AdminNotificationFactory.create_batch(3)

        result = AdminNotificationService.mark_all_read()

        assert result.data == 3
        assert not AdminNotification.objects.unread().exists()
