"""
Trash retention - permanently removes items left in Trash too long.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy.orm import Session

from filekeeper.core.config import settings
from filekeeper.core.exceptions import (AppException, PartialDeleteError,
                                        StoreUnavailableError)
from filekeeper.services import folder_store
from filekeeper.services.hierarchy import DeletionResult, HierarchyEngine
from filekeeper.services.system_folders import SystemFolder

logger = logging.getLogger(__name__)


def run_trash_cleanup(db: Session, now: Optional[datetime] = None) -> DeletionResult:
    """
    Purge every user's Trash of items trashed before the retention cutoff.

    Only direct children of Trash carry a trashed_at stamp; a folder's
    descendants go with it. A Trash that fails part-way, or whose purge is
    rejected, is logged and left for the next run while the remaining users
    are still processed. A database outage aborts the run so the caller can
    retry it.

    Args:
        db: Database session
        now: Reference time, defaults to the current UTC time

    Returns:
        Totals across all users
    """
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(days=settings.TRASH_RETENTION_DAYS)
    engine = HierarchyEngine(db)
    total = DeletionResult()

    for trash in folder_store.get_folders_named(db, SystemFolder.TRASH.value):
        try:
            result = engine.purge_expired_trash(trash, cutoff)
        except PartialDeleteError as e:
            logger.warning(
                f"Trash cleanup incomplete for user {trash.user_id}: "
                f"{e.records_deleted} records, {e.folders_deleted} folders removed"
            )
            total.add(DeletionResult(e.folders_deleted, e.records_deleted))
            continue
        except StoreUnavailableError:
            raise
        except AppException as e:
            logger.error(f"Trash cleanup failed for user {trash.user_id}: {e.message}")
            continue
        total.add(result)

    logger.info(
        f"Trash cleanup finished: {total.records_deleted} records, "
        f"{total.folders_deleted} folders removed (cutoff {cutoff.isoformat()})"
    )
    return total
