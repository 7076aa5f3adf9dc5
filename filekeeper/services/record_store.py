"""
Record store - persistence operations on records and their file metadata.

Records carry no owner column; they are scoped to a user through the folder
that contains them, so user-level queries join the folder table.
"""

import logging
from datetime import date, datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from filekeeper.models.category import Category
from filekeeper.models.folder import Folder
from filekeeper.models.record import Record
from filekeeper.models.record_file import RecordFile
from filekeeper.services.store_errors import (CategoryNotFoundError,
                                              FolderNotFoundError,
                                              InvalidFieldError,
                                              RowNotFoundError)

logger = logging.getLogger(__name__)

# Column limits for free-text fields
FIELD_MAX_LENGTHS = {
    "company_name": 64,
    "coupon_code": 32,
    "description": 512,
    "doc_type": 32,
    "name": 32,
    "product_id": 32,
}
DATE_FIELDS = ("purchase_date", "exp_date")
EARLIEST_DATE = date(1900, 1, 1)

EDITABLE_FIELDS = frozenset(
    {
        "folder_id",
        "category_id",
        "amount",
        *FIELD_MAX_LENGTHS,
        *DATE_FIELDS,
        "last_accessed_at",
        "is_starred",
        "notify_on",
    }
)


def _validate_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Trim text fields and check lengths and date bounds."""
    cleaned = dict(fields)
    for field, max_length in FIELD_MAX_LENGTHS.items():
        value = cleaned.get(field)
        if value is None:
            continue
        if field != "description":
            value = value.strip()
        if len(value) > max_length:
            raise InvalidFieldError(f"{field} must be {max_length} characters or less")
        cleaned[field] = value

    for field in DATE_FIELDS:
        value = cleaned.get(field)
        if value is not None and value < EARLIEST_DATE:
            raise InvalidFieldError(f"{field} must not be before {EARLIEST_DATE.isoformat()}")

    return cleaned


def _check_references(
    db: Session, folder_id: Optional[UUID], category_id: Optional[UUID]
) -> None:
    if folder_id is not None:
        if db.query(Folder.id).filter(Folder.id == folder_id).first() is None:
            raise FolderNotFoundError(f"Folder {folder_id} not found")
    if category_id is not None:
        if db.query(Category.id).filter(Category.id == category_id).first() is None:
            raise CategoryNotFoundError(f"Category {category_id} not found")


def create_record(
    db: Session,
    folder_id: UUID,
    file_url: Optional[str] = None,
    file_key: Optional[str] = None,
    **fields: Any,
) -> Record:
    """
    Insert a new record, optionally with the uploaded file's metadata.

    Args:
        db: Database session
        folder_id: Physical folder that will contain the record
        file_url: URL returned by object storage for the uploaded file
        file_key: Storage key returned alongside the URL
        **fields: Any of the editable record columns

    Returns:
        Created Record object

    Raises:
        InvalidFieldError: A field violates its bounds
        FolderNotFoundError: folder_id does not resolve
        CategoryNotFoundError: category_id does not resolve
    """
    unknown = set(fields) - EDITABLE_FIELDS
    if unknown:
        raise InvalidFieldError(f"Unknown record fields: {', '.join(sorted(unknown))}")

    cleaned = _validate_fields(fields)
    _check_references(db, folder_id, cleaned.get("category_id"))

    record = Record(folder_id=folder_id, **cleaned)
    if file_url:
        if len(file_url) > 256:
            raise InvalidFieldError("file_url must be 256 characters or less")
        record.files.append(RecordFile(file_url=file_url, file_key=file_key))

    db.add(record)
    db.commit()
    db.refresh(record)
    return record


def get_record_by_id(db: Session, record_id: UUID) -> Optional[Record]:
    """Get a record by its ID."""
    return db.query(Record).filter(Record.id == record_id).first()


def get_records_by_folder(db: Session, folder_id: UUID) -> List[Record]:
    """Records directly inside a folder."""
    return (
        db.query(Record)
        .filter(Record.folder_id == folder_id)
        .order_by(Record.created_at, Record.id)
        .all()
    )


def get_records_by_folders(db: Session, folder_ids: Iterable[UUID]) -> List[Record]:
    """Records directly inside any of the given folders."""
    ids = list(folder_ids)
    if not ids:
        return []
    return db.query(Record).filter(Record.folder_id.in_(ids)).all()


def _user_records(db: Session, user_id: UUID, exclude_folder_ids: Iterable[UUID]):
    query = (
        db.query(Record)
        .join(Folder, Record.folder_id == Folder.id)
        .filter(Folder.user_id == user_id)
    )
    excluded = list(exclude_folder_ids)
    if excluded:
        query = query.filter(Record.folder_id.notin_(excluded))
    return query


def get_starred_records(
    db: Session, user_id: UUID, exclude_folder_ids: Iterable[UUID] = ()
) -> List[Record]:
    """Starred records of a user, newest first."""
    return (
        _user_records(db, user_id, exclude_folder_ids)
        .filter(Record.is_starred.is_(True))
        .order_by(Record.created_at.desc(), Record.id)
        .all()
    )


def get_expiring_records(
    db: Session,
    user_id: UUID,
    window_days: int,
    exclude_folder_ids: Iterable[UUID] = (),
    today: Optional[date] = None,
) -> List[Record]:
    """
    Records already expired or expiring within window_days, soonest first.
    """
    today = today or date.today()
    horizon = today + timedelta(days=window_days)
    return (
        _user_records(db, user_id, exclude_folder_ids)
        .filter(Record.exp_date.isnot(None), Record.exp_date <= horizon)
        .order_by(Record.exp_date, Record.id)
        .all()
    )


def get_recent_records(
    db: Session, user_id: UUID, limit: int, exclude_folder_ids: Iterable[UUID] = ()
) -> List[Record]:
    """Most recently accessed records, most recent first."""
    return (
        _user_records(db, user_id, exclude_folder_ids)
        .order_by(Record.last_accessed_at.desc(), Record.id)
        .limit(limit)
        .all()
    )


def update_record_folder(
    db: Session,
    record_id: UUID,
    new_folder_id: UUID,
    origin_folder_id: Optional[UUID] = None,
    trashed_at: Optional[datetime] = None,
) -> Record:
    """
    Move a record to another folder.

    Only the folder pointer and the trash bookkeeping columns change.
    """
    record = get_record_by_id(db, record_id)
    if record is None:
        raise RowNotFoundError(f"Record {record_id} not found")
    _check_references(db, new_folder_id, None)

    record.folder_id = new_folder_id
    record.origin_folder_id = origin_folder_id
    record.trashed_at = trashed_at
    db.commit()
    db.refresh(record)
    return record


def update_record(db: Session, record: Record, **changes: Any) -> Record:
    """
    Update editable fields of a record.

    last_accessed_at is left as it is unless passed explicitly.
    """
    unknown = set(changes) - EDITABLE_FIELDS
    if unknown:
        raise InvalidFieldError(f"Unknown record fields: {', '.join(sorted(unknown))}")

    cleaned = _validate_fields(changes)
    _check_references(db, cleaned.get("folder_id"), cleaned.get("category_id"))

    for field, value in cleaned.items():
        if field == "folder_id" and value is None:
            raise InvalidFieldError("folder_id is required")
        setattr(record, field, value)

    db.commit()
    db.refresh(record)
    return record


def touch_record(db: Session, record: Record) -> Record:
    """Stamp last_accessed_at with the current time."""
    record.last_accessed_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(record)
    return record


def delete_record(db: Session, record_id: UUID) -> bool:
    """
    Delete a record and its file metadata.

    Returns:
        True if the record was deleted, False if it was already gone
    """
    record = get_record_by_id(db, record_id)
    if record is None:
        return False
    db.delete(record)
    db.commit()
    logger.debug(f"Record row deleted: {record_id}")
    return True


def get_trashed_records_before(
    db: Session, folder_id: UUID, cutoff: datetime
) -> List[Record]:
    """Records directly in a folder whose trashed_at is older than cutoff."""
    return (
        db.query(Record)
        .filter(
            Record.folder_id == folder_id,
            Record.trashed_at.isnot(None),
            Record.trashed_at < cutoff,
        )
        .all()
    )
