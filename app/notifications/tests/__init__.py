"""
Tests for notifications app.

This package contains test modules for:
- test_models.py: AdminNotification model tests
- test_services.py: AdminNotificationService tests
- test_dispatcher.py: SideEffectDispatcher tests (Discord + email)
- test_views.py: Admin notification API tests

Usage:
    pytest notifications/tests/
    pytest notifications/tests/test_dispatcher.py
"""
