"""
Tests for payments app.

This package contains test modules for:
- test_models.py: WebhookEvent model tests
- test_signatures.py: Stripe and Square signature verification
- test_events.py: Event parsing and payment outcome reduction
- test_tasks.py: Webhook cleanup task tests

Adapter and webhook endpoint tests live in payments/adapters/tests/ and
payments/webhooks/tests/.

Usage:
    pytest payments/tests/
    pytest payments/tests/test_signatures.py
"""
