"""
Payment admin configuration.

Registers the webhook audit table with the Django admin.
"""

from django.contrib import admin

from payments.models import WebhookEvent


@admin.register(WebhookEvent)
class WebhookEventAdmin(admin.ModelAdmin):
    """
    Admin configuration for WebhookEvent.

    Provides visibility into webhook processing status.
    Webhook events are immutable once received.
    """

    list_display = [
        "event_id",
        "provider",
        "event_type",
        "object_id",
        "status",
        "attempts",
        "processed_at",
        "created_at",
    ]
    list_filter = ["provider", "status", "event_type", "created_at"]
    search_fields = ["id", "event_id", "event_type"]
    readonly_fields = [
        "id",
        "created_at",
        "updated_at",
        "provider",
        "event_id",
        "event_type",
        "payload",
        "processed_at",
        "attempts",
    ]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    fieldsets = (
        (
            None,
            {
                "fields": ("id", "provider", "event_id", "event_type", "status"),
            },
        ),
        (
            "Processing",
            {
                "fields": ("processed_at", "attempts"),
            },
        ),
        (
            "Error Info",
            {
                "fields": ("error_message",),
                "classes": ("collapse",),
            },
        ),
        (
            "Payload",
            {
                "fields": ("payload",),
                "classes": ("collapse",),
            },
        ),
        (
            "Timestamps",
            {
                "fields": ("created_at", "updated_at"),
                "classes": ("collapse",),
            },
        ),
    )

    @admin.display(description="Object")
    def object_id(self, obj):
        return obj.get_object_id() or "-"

    def has_add_permission(self, request):
        return False
