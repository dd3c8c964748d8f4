"""
Tests for catalog views.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from django.urls import reverse
from rest_framework import status

from catalog.services import SyncSummary
from catalog.tests.factories import ProductFactory
from payments.exceptions import StripeAPIUnavailableError


@pytest.mark.django_db
class TestProductListView:
    url = reverse("catalog:product-list")

    def test_lists_active_products_publicly(self, api_client):
        visible = ProductFactory(title="Visible")
        ProductFactory(title="Hidden", is_active=False)

        response = api_client.get(self.url)

        assert response.status_code == status.HTTP_200_OK
        assert [item["id"] for item in response.data] == [str(visible.id)]
        assert "stripe_product_id" not in response.data[0]

    def test_filters_by_category(self, api_client):
        ProductFactory(category="ranks")
        kit = ProductFactory(category="kits")

        response = api_client.get(self.url, {"category": "kits"})

        assert [item["id"] for item in response.data] == [str(kit.id)]


@pytest.mark.django_db
class TestProductStockView:
    def _url(self, product):
        return reverse("catalog:product-stock", kwargs={"pk": product.pk})

    def test_customer_is_forbidden(self, authenticated_client):
        product = ProductFactory()

        response = authenticated_client.patch(self._url(product), {"stock": 3}, format="json")

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @patch("catalog.services.StripeAdapter.update_product_metadata")
    def test_staff_sets_stock(self, mock_update, staff_client):
        product = ProductFactory(stock=1)

        response = staff_client.patch(self._url(product), {"stock": 30}, format="json")

        assert response.status_code == status.HTTP_200_OK
        assert response.data["stock"] == 30
        assert response.data["stripe_product_id"] == product.stripe_product_id

    def test_negative_stock_rejected(self, staff_client):
        product = ProductFactory()

        response = staff_client.patch(self._url(product), {"stock": -1}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    @patch("catalog.services.StripeAdapter.update_product_metadata")
    def test_stripe_failure_is_502(self, mock_update, staff_client):
        mock_update.side_effect = StripeAPIUnavailableError("Stripe is down")
        product = ProductFactory(stock=1)

        response = staff_client.patch(self._url(product), {"stock": 30}, format="json")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        product.refresh_from_db()
        assert product.stock == 1


@pytest.mark.django_db
class TestCatalogSyncViews:
    @patch("catalog.views.CatalogSyncService.sync_stripe_catalog")
    def test_stripe_sync_returns_counts(self, mock_sync, staff_client):
        mock_sync.return_value = SyncSummary(synced=3, created=1, updated=2)

        response = staff_client.post(reverse("catalog:sync-stripe"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data == {
            "success": True,
            "synced": 3,
            "created": 1,
            "updated": 2,
            "skipped": 0,
        }

    @patch("catalog.views.sync_square_catalog_task.delay")
    def test_square_sync_is_queued(self, mock_delay, staff_client):
        mock_delay.return_value = SimpleNamespace(id="task-123")

        response = staff_client.post(reverse("catalog:sync-square"))

        assert response.status_code == status.HTTP_202_ACCEPTED
        assert response.data == {"queued": True, "task_id": "task-123"}

    def test_sync_requires_staff(self, authenticated_client):
        response = authenticated_client.post(reverse("catalog:sync-stripe"))

        assert response.status_code == status.HTTP_403_FORBIDDEN
