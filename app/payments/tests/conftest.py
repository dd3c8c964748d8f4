"""
Pytest fixtures for payment tests.
"""

import pytest

from payments.state_machines import WebhookEventStatus
from payments.tests.factories import WebhookEventFactory


@pytest.fixture
def webhook_event(db):
    return WebhookEventFactory()


@pytest.fixture
def processed_webhook_event(db):
    return WebhookEventFactory(status=WebhookEventStatus.PROCESSED, attempts=1)
