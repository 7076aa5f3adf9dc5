"""Folder API endpoints for the per-user folder tree."""

from typing import List

from fastapi import APIRouter, Depends, status

from filekeeper.core.deps import (get_current_user, get_hierarchy_engine,
                                  parse_uuid)
from filekeeper.models.folder import Folder
from filekeeper.models.user import User
from filekeeper.schemas.folder import (DeletionResultOut, FolderCreate,
                                       FolderMove, FolderOut, FolderRename,
                                       FolderRestore)
from filekeeper.schemas.record import RecordOut
from filekeeper.services.hierarchy import HierarchyEngine
from filekeeper.services.system_folders import (VirtualFolderView,
                                                classify_folder,
                                                is_protected_name)


router = APIRouter(prefix="/folders", tags=["folders"])


def _folder_to_out(folder: Folder) -> FolderOut:
    """Convert a Folder model to FolderOut, tagging system and virtual folders."""
    view = classify_folder(folder)
    return FolderOut(
        id=folder.id,
        user_id=folder.user_id,
        parent_folder_id=folder.parent_folder_id,
        name=folder.name,
        kind="virtual" if isinstance(view, VirtualFolderView) else "physical",
        is_system=is_protected_name(folder.name),
        trashed_at=folder.trashed_at,
        created_at=folder.created_at,
        updated_at=folder.updated_at,
    )


@router.get("", response_model=List[FolderOut])
def list_root_folders(
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    List root-level folders, system folders included.
    """
    return [_folder_to_out(f) for f in engine.list_child_folders(current_user.id, None)]


@router.get("/all", response_model=List[FolderOut])
def list_all_folders(
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    List every folder of the current user at any depth.
    """
    return [_folder_to_out(f) for f in engine.list_folders(current_user.id)]


@router.get("/name/{name}", response_model=FolderOut)
def get_folder_by_name(
    name: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Look up a folder by exact name, e.g. "Trash".
    """
    return _folder_to_out(engine.get_folder_by_name(current_user.id, name))


@router.get("/virtual/{name}", response_model=List[RecordOut])
def get_virtual_folder_records(
    name: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Records in a virtual folder: Starred, Recent or Expiring.
    """
    return engine.resolve_virtual_folder(current_user.id, name)


@router.post("", response_model=FolderOut, status_code=status.HTTP_201_CREATED)
def create_folder(
    data: FolderCreate,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Create a folder under a parent, or at root level when no parent is given.
    """
    folder = engine.create_subfolder(current_user.id, data.parent_folder_id, data.name)
    return _folder_to_out(folder)


@router.get("/{folder_id}", response_model=FolderOut)
def get_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    folder_uuid = parse_uuid(folder_id, "folder ID")
    return _folder_to_out(engine.get_folder(current_user.id, folder_uuid))


@router.get("/{folder_id}/children", response_model=List[FolderOut])
def list_child_folders(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Direct child folders, ordered by name.
    """
    folder_uuid = parse_uuid(folder_id, "folder ID")
    return [_folder_to_out(f) for f in engine.list_child_folders(current_user.id, folder_uuid)]


@router.get("/{folder_id}/records", response_model=List[RecordOut])
def list_folder_records(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Records in a folder. Virtual folders return their computed contents.
    """
    folder_uuid = parse_uuid(folder_id, "folder ID")
    return engine.list_folder_records(current_user.id, folder_uuid)


@router.patch("/{folder_id}", response_model=FolderOut)
def rename_folder(
    folder_id: str,
    data: FolderRename,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    folder_uuid = parse_uuid(folder_id, "folder ID")
    return _folder_to_out(engine.rename_folder(current_user.id, folder_uuid, data.name))


@router.put("/{folder_id}/parent", response_model=FolderOut)
def move_folder(
    folder_id: str,
    data: FolderMove,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Move a folder under a new parent (null for root level).
    """
    folder_uuid = parse_uuid(folder_id, "folder ID")
    folder = engine.move_folder(current_user.id, folder_uuid, data.parent_folder_id)
    return _folder_to_out(folder)


@router.post("/{folder_id}/trash", response_model=FolderOut)
def move_folder_to_trash(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Move a folder, with everything inside it, to Trash.
    """
    folder_uuid = parse_uuid(folder_id, "folder ID")
    return _folder_to_out(engine.move_folder_to_trash(current_user.id, folder_uuid))


@router.post("/{folder_id}/restore", response_model=FolderOut)
def restore_folder(
    folder_id: str,
    data: FolderRestore,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    folder_uuid = parse_uuid(folder_id, "folder ID")
    folder = engine.restore_folder(current_user.id, folder_uuid, data.destination_parent_id)
    return _folder_to_out(folder)


@router.delete("/{folder_id}", response_model=DeletionResultOut)
def permanent_delete_folder(
    folder_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Permanently delete a folder in Trash together with its contents.

    Deleting an id that is already gone succeeds with zero counts.
    """
    folder_uuid = parse_uuid(folder_id, "folder ID")
    result = engine.permanent_delete_folder(current_user.id, folder_uuid)
    return DeletionResultOut(
        folders_deleted=result.folders_deleted,
        records_deleted=result.records_deleted,
    )
