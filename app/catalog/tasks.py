"""
Celery tasks for catalog synchronisation.

Usage:
    from catalog.tasks import sync_square_catalog_task

    sync_square_catalog_task.delay()
"""

from __future__ import annotations

import logging

from celery import shared_task

from catalog.services import CatalogSyncService
from payments.exceptions import SquareAPIError

logger = logging.getLogger(__name__)

MAX_SYNC_RETRIES = 3


@shared_task(
    bind=True,
    autoretry_for=(SquareAPIError,),
    retry_backoff=True,
    retry_backoff_max=300,
    retry_kwargs={"max_retries": MAX_SYNC_RETRIES},
)
def sync_square_catalog_task(self) -> dict:
    """
    Mirror the Square catalog into Product rows.

    Queued by the Square ``catalog.version.updated`` webhook and by the
    admin sync endpoint.

    Returns:
        Sync counts (synced, created, updated, skipped)
    """
    logger.info(
        "Starting Square catalog sync",
        extra={"task_id": self.request.id, "attempt": self.request.retries + 1},
    )
    return CatalogSyncService.sync_square_catalog().to_dict()
