"""
Ownership guard.

Folders and records share one set of tables across all users, so this check
is the only thing keeping one user's tree out of another's reach.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from filekeeper.core.exceptions import OwnershipError
from filekeeper.models.folder import Folder
from filekeeper.models.record import Record
from filekeeper.services import folder_store

logger = logging.getLogger(__name__)


def owner_of(db: Session, entity: Union[Folder, Record]) -> Optional[UUID]:
    """Return the owning user id of a folder, or of a record via its folder."""
    if isinstance(entity, Folder):
        return entity.user_id

    folder = folder_store.get_folder_by_id(db, entity.folder_id)
    if folder is None:
        return None
    return folder.user_id


def assert_owns(db: Session, user_id: UUID, entity: Union[Folder, Record]) -> None:
    """
    Raise OwnershipError unless user_id owns the folder or record.

    Args:
        db: Database session
        user_id: Acting principal
        entity: Folder or Record to check

    Raises:
        OwnershipError: If the entity belongs to someone else (or to nobody)
    """
    owner_id = owner_of(db, entity)
    if owner_id is None or owner_id != user_id:
        logger.warning(
            f"Ownership check failed: user {user_id} on "
            f"{type(entity).__name__.lower()} {entity.id}"
        )
        raise OwnershipError()
