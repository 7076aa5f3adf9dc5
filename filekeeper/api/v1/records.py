"""Record API endpoints."""

from fastapi import APIRouter, Depends, status

from filekeeper.core.deps import (get_current_user, get_hierarchy_engine,
                                  parse_uuid)
from filekeeper.models.user import User
from filekeeper.schemas.folder import DeletionResultOut
from filekeeper.schemas.record import (RecordCreate, RecordOut, RecordRestore,
                                       RecordUpdate)
from filekeeper.services.hierarchy import HierarchyEngine

router = APIRouter(prefix="/records", tags=["records"])

# Columns that cannot be cleared by sending null
NON_NULLABLE_FIELDS = ("folder_id", "is_starred", "notify_on")


@router.post("", response_model=RecordOut, status_code=status.HTTP_201_CREATED)
def create_record(
    data: RecordCreate,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Create a record in a content folder.

    - **folder_id**: Target folder (not a system folder, not in Trash)
    - **file_url** / **file_key**: Optional descriptor of an already uploaded file
    """
    fields = data.model_dump(exclude_none=True, exclude={"folder_id", "file_url", "file_key"})
    return engine.create_record(
        current_user.id,
        data.folder_id,
        file_url=data.file_url,
        file_key=data.file_key,
        **fields,
    )


@router.get("/{record_id}", response_model=RecordOut)
def get_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Get a record. Reading it moves it to the top of "Recent".
    """
    record_uuid = parse_uuid(record_id, "record ID")
    return engine.get_record(current_user.id, record_uuid)


@router.put("/{record_id}", response_model=RecordOut)
def update_record(
    record_id: str,
    data: RecordUpdate,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Update record metadata. Only fields present in the body change.
    """
    record_uuid = parse_uuid(record_id, "record ID")
    changes = {
        field: value
        for field, value in data.model_dump(exclude_unset=True).items()
        if value is not None or field not in NON_NULLABLE_FIELDS
    }
    return engine.update_record(current_user.id, record_uuid, **changes)


@router.post("/{record_id}/trash", response_model=RecordOut)
def move_record_to_trash(
    record_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    record_uuid = parse_uuid(record_id, "record ID")
    return engine.move_record_to_trash(current_user.id, record_uuid)


@router.post("/{record_id}/restore", response_model=RecordOut)
def restore_record(
    record_id: str,
    data: RecordRestore,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    """
    Restore a record from Trash, to its original folder unless a destination is given.
    """
    record_uuid = parse_uuid(record_id, "record ID")
    return engine.restore_record(current_user.id, record_uuid, data.destination_folder_id)


@router.delete("/{record_id}", response_model=DeletionResultOut)
def permanent_delete_record(
    record_id: str,
    current_user: User = Depends(get_current_user),
    engine: HierarchyEngine = Depends(get_hierarchy_engine),
):
    record_uuid = parse_uuid(record_id, "record ID")
    result = engine.permanent_delete_record(current_user.id, record_uuid)
    return DeletionResultOut(
        folders_deleted=result.folders_deleted,
        records_deleted=result.records_deleted,
    )
