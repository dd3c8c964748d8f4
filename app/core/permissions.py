"""
Shared DRF permission classes.
"""

from rest_framework.permissions import BasePermission


class IsStaffUser(BasePermission):
    """
    Allow access only to authenticated store administrators.

    Administrators are users with ``is_staff`` set; the same flag grants
    access to the Django admin.
    """

    message = "Administrator access required."

    def has_permission(self, request, view):
        user = request.user
        return bool(user and user.is_authenticated and user.is_staff)
