"""
Django admin configuration for notification models.
"""

from django.contrib import admin

from notifications.models import AdminNotification
from notifications.services import AdminNotificationService


@admin.register(AdminNotification)
class AdminNotificationAdmin(admin.ModelAdmin):
    """Admin configuration for AdminNotification."""

    list_display = ["title", "type", "reference_id", "is_read", "created_at"]
    list_filter = ["type", "is_read"]
    search_fields = ["title", "message", "reference_id"]
    readonly_fields = ["read_at", "created_at", "updated_at"]
    actions = ["mark_read"]

    @admin.action(description="Mark selected notifications as read")
    def mark_read(self, request, queryset):
        for notification in queryset.filter(is_read=False):
            AdminNotificationService.mark_read(notification.pk)
        self.message_user(request, "Notifications marked as read.")
