"""
Pytest fixtures for payment adapter tests.

Sections:
    - Mock Stripe Fixtures
    - Mock Square Fixtures
"""

from unittest.mock import MagicMock, patch

import pytest


# =============================================================================
# Mock Stripe Fixtures
# =============================================================================


class MockStripeObject:
    """Mock Stripe API object with attribute access and to_dict()."""

    def __init__(self, **data):
        self._data = data

    def __getattr__(self, name):
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(name) from None

    def to_dict(self):
        return dict(self._data)


@pytest.fixture
def stripe_object():
    return MockStripeObject


@pytest.fixture
def mock_checkout_session_create():
    with patch("stripe.checkout.Session.create") as mock:
        yield mock


@pytest.fixture
def mock_product_modify():
    with patch("stripe.Product.modify") as mock:
        yield mock


@pytest.fixture
def mock_product_list():
    with patch("stripe.Product.list") as mock:
        yield mock


# =============================================================================
# Mock Square Fixtures
# =============================================================================


@pytest.fixture
def square_response():
    """Build a requests.Response stand-in."""

    def build(status_code=200, json_data=None):
        response = MagicMock()
        response.status_code = status_code
        response.ok = status_code < 400
        response.json.return_value = json_data if json_data is not None else {}
        return response

    return build


@pytest.fixture
def mock_square_request():
    with patch("payments.adapters.square_adapter.requests.request") as mock:
        yield mock
