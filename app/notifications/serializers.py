"""
Serializers for the admin notification API.
"""

from rest_framework import serializers

from notifications.models import AdminNotification


class AdminNotificationSerializer(serializers.ModelSerializer):
    class Meta:
        model = AdminNotification
        fields = [
            "id",
            "type",
            "title",
            "message",
            "reference_id",
            "is_read",
            "read_at",
            "created_at",
        ]
        read_only_fields = fields


class MarkAllReadResponseSerializer(serializers.Serializer):
    marked_count = serializers.IntegerField()
