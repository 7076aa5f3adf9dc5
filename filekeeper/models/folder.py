"""Folder model for the per-user folder tree."""

import uuid

from sqlalchemy import Column, DateTime, ForeignKey, String, Uuid
from sqlalchemy.sql import func

from filekeeper.db.base import Base


class Folder(Base):
    """
    A folder in a user's tree.

    parent_folder_id points at another folder of the same user, or is NULL
    for root-level folders. Deleting is handled by the hierarchy engine
    leaf-first, so no database-level cascade is declared here.
    """

    __tablename__ = "folders"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    parent_folder_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("folders.id"),
        nullable=True,
        index=True,
    )
    name = Column(String(64), nullable=False)
    # Set while the folder sits directly under Trash
    trashed_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
