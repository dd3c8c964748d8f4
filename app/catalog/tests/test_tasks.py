"""
Tests for catalog Celery tasks.
"""

from unittest.mock import patch

import pytest

from catalog.services import SyncSummary
from catalog.tasks import sync_square_catalog_task


@pytest.mark.django_db
class TestSyncSquareCatalogTask:
    @patch("catalog.tasks.CatalogSyncService.sync_square_catalog")
    def test_returns_summary_dict(self, mock_sync):
        mock_sync.return_value = SyncSummary(synced=2, created=2)

        result = sync_square_catalog_task.apply()

        assert result.successful()
        assert result.get() == {"synced": 2, "created": 2, "updated": 0, "skipped": 0}
