"""
Notifications app for administrator alerts and post-purchase side effects.

This app provides:
- AdminNotification model: the store owner's inbox (new orders, failed payments)
- AdminNotificationService for creating and managing those notifications
- SideEffectDispatcher: everything that happens once an order completes
  (admin alert, Discord ticket, customer role, announcement, email receipt)
- REST API for administrators to read and clear notifications

Usage:
    from notifications.dispatcher import SideEffectDispatcher

    results = SideEffectDispatcher.from_settings().dispatch(order)
"""
