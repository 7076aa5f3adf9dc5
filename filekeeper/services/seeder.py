"""
Bootstrap seeder - creates the folders every account starts with.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy.orm import Session

from filekeeper.models.folder import Folder
from filekeeper.services import folder_store
from filekeeper.services.system_folders import (DEFAULT_CONTENT_FOLDERS,
                                                SystemFolder)

logger = logging.getLogger(__name__)


def seed_default_folders(db: Session, user_id: UUID) -> List[Folder]:
    """
    Create the system folders and the default content folders for a user.

    Each folder is looked up by name before it is inserted, so running the
    seeder again (or after a partial failure) only fills in what is missing.

    Args:
        db: Database session
        user_id: Owner of the new folders

    Returns:
        Folders created by this call, in creation order
    """
    names = [f.value for f in SystemFolder] + list(DEFAULT_CONTENT_FOLDERS)
    created = []

    for name in names:
        if folder_store.get_folder_by_name(db, user_id, name) is not None:
            continue
        created.append(folder_store.create_folder(db, user_id=user_id, name=name))

    if created:
        logger.info(f"Seeded {len(created)} folders for user {user_id}")
    return created
