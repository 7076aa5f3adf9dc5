"""
Celery task for the Trash retention policy.
"""

import logging
from datetime import datetime
from typing import Optional

from celery import shared_task

from filekeeper.celery_app.config import RETRY_CONFIG
from filekeeper.celery_app.tasks.base import DatabaseTask
from filekeeper.core.exceptions import StoreUnavailableError
from filekeeper.services.trash_cleanup import run_trash_cleanup

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    base=DatabaseTask,
    name="filekeeper.celery_app.tasks.trash.purge_expired_trash",
    max_retries=RETRY_CONFIG["max_retries"],
)
def purge_expired_trash_task(self, now: Optional[str] = None):
    """
    Permanently delete Trash items older than TRASH_RETENTION_DAYS.

    Args:
        now: Optional ISO timestamp to use as the reference time
    """
    reference = datetime.fromisoformat(now) if now else None
    logger.info("Starting trash cleanup")

    try:
        result = run_trash_cleanup(self.db, now=reference)
    except StoreUnavailableError as e:
        logger.warning(f"Trash cleanup could not reach the database, retrying: {e}")
        raise self.retry(exc=e, countdown=60 * (self.request.retries + 1))

    return {
        "status": "completed",
        "folders_deleted": result.folders_deleted,
        "records_deleted": result.records_deleted,
    }
