"""
Folder store - persistence operations on the folder table.

Every mutation commits on its own, so each call is a single-row atomic
change. Callers scope reads by user id; the store does not check ownership
beyond keeping a parent inside its child's tree.
"""

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from filekeeper.models.folder import Folder
from filekeeper.models.record import Record
from filekeeper.services.store_errors import (CrossOwnerError,
                                              DependentRowsError,
                                              InvalidFieldError,
                                              ParentNotFoundError,
                                              ProtectedRowError,
                                              RowNotFoundError)
from filekeeper.services.system_folders import is_protected_name

logger = logging.getLogger(__name__)

FOLDER_NAME_MIN_LENGTH = 1
FOLDER_NAME_MAX_LENGTH = 64


def normalize_folder_name(name: Optional[str]) -> str:
    """
    Trim a folder name and check its length.

    Raises:
        InvalidFieldError: If the trimmed name is empty or longer than 64 chars
    """
    if name is None:
        raise InvalidFieldError("Folder name is required")
    trimmed = name.strip()
    if len(trimmed) < FOLDER_NAME_MIN_LENGTH:
        raise InvalidFieldError("Folder name is required")
    if len(trimmed) > FOLDER_NAME_MAX_LENGTH:
        raise InvalidFieldError(
            f"Folder name must be {FOLDER_NAME_MAX_LENGTH} characters or less"
        )
    return trimmed


def _check_parent(db: Session, user_id: UUID, parent_folder_id: Optional[UUID]) -> None:
    if parent_folder_id is None:
        return
    parent = get_folder_by_id(db, parent_folder_id)
    if parent is None:
        raise ParentNotFoundError(f"Parent folder {parent_folder_id} not found")
    if parent.user_id != user_id:
        raise CrossOwnerError(f"Parent folder {parent_folder_id} belongs to another user")


def create_folder(
    db: Session,
    user_id: UUID,
    name: str,
    parent_folder_id: Optional[UUID] = None,
) -> Folder:
    """
    Insert a new folder.

    Args:
        db: Database session
        user_id: Owner of the new folder
        name: Display name (trimmed, 1-64 chars)
        parent_folder_id: Parent folder, or None for a root-level folder

    Returns:
        Created Folder object

    Raises:
        InvalidFieldError: Name violates length bounds
        ParentNotFoundError: parent_folder_id does not resolve
        CrossOwnerError: Parent belongs to another user
    """
    clean_name = normalize_folder_name(name)
    _check_parent(db, user_id, parent_folder_id)

    folder = Folder(
        user_id=user_id,
        parent_folder_id=parent_folder_id,
        name=clean_name,
    )
    db.add(folder)
    db.commit()
    db.refresh(folder)
    return folder


def get_folder_by_id(db: Session, folder_id: UUID) -> Optional[Folder]:
    """Get a folder by its ID."""
    return db.query(Folder).filter(Folder.id == folder_id).first()


def get_folder_by_name(db: Session, user_id: UUID, name: str) -> Optional[Folder]:
    """
    Get a user's folder by exact name.

    Used to resolve system folders by their well-known names. Content folder
    names are not unique, so the oldest match wins.
    """
    return (
        db.query(Folder)
        .filter(Folder.user_id == user_id, Folder.name == name)
        .order_by(Folder.created_at, Folder.id)
        .first()
    )


def get_child_folders(
    db: Session, user_id: UUID, parent_folder_id: Optional[UUID]
) -> List[Folder]:
    """Direct children of a folder ordered by name; None lists root-level folders."""
    query = db.query(Folder).filter(Folder.user_id == user_id)
    if parent_folder_id is None:
        query = query.filter(Folder.parent_folder_id.is_(None))
    else:
        query = query.filter(Folder.parent_folder_id == parent_folder_id)
    return query.order_by(Folder.name).all()


def list_folders_by_user(db: Session, user_id: UUID) -> List[Folder]:
    """All folders of a user, at any depth."""
    return (
        db.query(Folder)
        .filter(Folder.user_id == user_id)
        .order_by(Folder.created_at, Folder.id)
        .all()
    )


def _get_mutable_folder(db: Session, folder_id: UUID) -> Folder:
    folder = get_folder_by_id(db, folder_id)
    if folder is None:
        raise RowNotFoundError(f"Folder {folder_id} not found")
    if is_protected_name(folder.name):
        raise ProtectedRowError(f"Folder '{folder.name}' is a system folder")
    return folder


def rename_folder(db: Session, folder_id: UUID, new_name: str) -> Folder:
    """Change a folder's name. System folders are rejected."""
    folder = _get_mutable_folder(db, folder_id)
    folder.name = normalize_folder_name(new_name)
    db.commit()
    db.refresh(folder)
    return folder


def reparent_folder(
    db: Session,
    folder_id: UUID,
    new_parent_id: Optional[UUID],
    trashed_at: Optional[datetime] = None,
) -> Folder:
    """
    Point a folder at a new parent. System folders are rejected.

    trashed_at is written together with the parent pointer: a timestamp when
    the folder goes under Trash, None when it leaves.
    """
    folder = _get_mutable_folder(db, folder_id)
    _check_parent(db, folder.user_id, new_parent_id)
    folder.parent_folder_id = new_parent_id
    folder.trashed_at = trashed_at
    db.commit()
    db.refresh(folder)
    return folder


def delete_folder(db: Session, folder_id: UUID) -> bool:
    """
    Delete a single folder row.

    Returns:
        True if the row was deleted, False if it was already gone

    Raises:
        DependentRowsError: Child folders or records still reference the folder
    """
    folder = get_folder_by_id(db, folder_id)
    if folder is None:
        return False

    has_children = (
        db.query(Folder.id).filter(Folder.parent_folder_id == folder_id).first()
        is not None
    )
    has_records = (
        db.query(Record.id).filter(Record.folder_id == folder_id).first() is not None
    )
    if has_children or has_records:
        raise DependentRowsError(
            f"Folder {folder_id} still has child folders or records"
        )

    db.delete(folder)
    db.commit()
    logger.debug(f"Folder row deleted: {folder_id}")
    return True


def get_folders_named(db: Session, name: str) -> List[Folder]:
    """Folders with the given name across all users (used to find every Trash)."""
    return db.query(Folder).filter(Folder.name == name).all()


def get_trashed_children_before(
    db: Session, parent_folder_id: UUID, cutoff: datetime
) -> List[Folder]:
    """Direct children of a folder whose trashed_at is older than cutoff."""
    return (
        db.query(Folder)
        .filter(
            Folder.parent_folder_id == parent_folder_id,
            Folder.trashed_at.isnot(None),
            Folder.trashed_at < cutoff,
        )
        .all()
    )
