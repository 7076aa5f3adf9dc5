"""Schemas for the folder tree."""
from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class FolderCreate(BaseModel):
    """Folder creation request."""
    name: str = Field(..., description="Folder name, 1-64 characters after trimming")
    parent_folder_id: Optional[UUID] = Field(None, description="Parent folder ID (null for root level)")


class FolderRename(BaseModel):
    name: str = Field(..., description="Folder name, 1-64 characters after trimming")


class FolderMove(BaseModel):
    parent_folder_id: Optional[UUID] = Field(None, description="New parent folder ID (null for root level)")


class FolderRestore(BaseModel):
    destination_parent_id: Optional[UUID] = Field(
        None, description="Where to restore the folder (null for root level)"
    )


class FolderOut(BaseModel):
    """Folder response."""
    id: UUID
    user_id: UUID
    parent_folder_id: Optional[UUID] = None
    name: str
    kind: Literal["physical", "virtual"] = "physical"
    is_system: bool = False
    trashed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DeletionResultOut(BaseModel):
    """Permanent delete response."""
    folders_deleted: int = 0
    records_deleted: int = 0
