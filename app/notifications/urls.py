"""
URL configuration for notifications API.

Routes:
    /admin/               - List notifications (GET)
    /admin/{id}/          - Delete notification (DELETE)
    /admin/{id}/read/     - Mark single as read (POST)
    /admin/read-all/      - Mark all as read (POST)
"""

from rest_framework.routers import DefaultRouter

from notifications.views import AdminNotificationViewSet

router = DefaultRouter()
router.register(r"admin", AdminNotificationViewSet, basename="admin-notification")

app_name = "notifications"
urlpatterns = router.urls
