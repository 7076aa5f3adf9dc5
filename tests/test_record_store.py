"""
Tests for the record store.
"""
from datetime import date, timedelta
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from filekeeper.models.category import Category
from filekeeper.models.record_file import RecordFile
from filekeeper.models.user import User
from filekeeper.services import folder_store, record_store
from filekeeper.services.store_errors import (CategoryNotFoundError,
                                              FolderNotFoundError,
                                              InvalidFieldError,
                                              RowNotFoundError)


@pytest.fixture
def folder(db: Session, test_user: User):
    return folder_store.create_folder(db, test_user.id, "Receipts")


class TestCreateRecord:
    """Tests for record creation."""

    def test_create_with_fields(self, db: Session, folder, category: Category):
        record = record_store.create_record(
            db,
            folder.id,
            name="  TV  ",
            company_name="Acme",
            amount=499.0,
            category_id=category.id,
            exp_date=date(2030, 1, 1),
        )
        assert record.name == "TV"
        assert record.is_starred is False
        assert record.last_accessed_at is not None
        assert record.files == []

    def test_create_with_file(self, db: Session, folder):
        record = record_store.create_record(
            db, folder.id, file_url="https://files.example.com/a.pdf", file_key="a.pdf"
        )
        assert len(record.files) == 1
        assert record.files[0].file_url == "https://files.example.com/a.pdf"

    def test_unknown_folder(self, db: Session):
        with pytest.raises(FolderNotFoundError):
            record_store.create_record(db, uuid4(), name="Lost")

    def test_unknown_category(self, db: Session, folder):
        with pytest.raises(CategoryNotFoundError):
            record_store.create_record(db, folder.id, category_id=uuid4())

    def test_field_too_long(self, db: Session, folder):
        with pytest.raises(InvalidFieldError):
            record_store.create_record(db, folder.id, coupon_code="x" * 33)

    def test_date_before_1900(self, db: Session, folder):
        with pytest.raises(InvalidFieldError):
            record_store.create_record(db, folder.id, purchase_date=date(1899, 12, 31))

    def test_unknown_field(self, db: Session, folder):
        with pytest.raises(InvalidFieldError):
            record_store.create_record(db, folder.id, colour="red")


class TestVirtualQueries:
    """Tests for the starred, expiring and recent queries."""

    def test_starred_scoped_and_excluding(self, db: Session, test_user: User, other_user: User, folder):
        theirs = folder_store.create_folder(db, other_user.id, "Theirs")
        hidden = folder_store.create_folder(db, test_user.id, "Hidden")
        starred = record_store.create_record(db, folder.id, is_starred=True)
        record_store.create_record(db, folder.id, is_starred=False)
        record_store.create_record(db, theirs.id, is_starred=True)
        record_store.create_record(db, hidden.id, is_starred=True)

        result = record_store.get_starred_records(db, test_user.id, [hidden.id])
        assert [r.id for r in result] == [starred.id]

    def test_expiring_window(self, db: Session, test_user: User, folder):
        today = date(2026, 1, 1)
        expired = record_store.create_record(db, folder.id, exp_date=today - timedelta(days=3))
        soon = record_store.create_record(db, folder.id, exp_date=today + timedelta(days=30))
        record_store.create_record(db, folder.id, exp_date=today + timedelta(days=31))
        record_store.create_record(db, folder.id)

        result = record_store.get_expiring_records(db, test_user.id, 30, today=today)
        assert [r.id for r in result] == [expired.id, soon.id]

    def test_recent_limit_and_order(self, db: Session, test_user: User, folder):
        records = [record_store.create_record(db, folder.id) for _ in range(3)]
        record_store.touch_record(db, records[0])

        result = record_store.get_recent_records(db, test_user.id, limit=2)
        assert len(result) == 2
        assert result[0].id == records[0].id


class TestMutations:
    """Tests for record updates and deletion."""

    def test_update_record_folder_with_origin(self, db: Session, test_user: User, folder):
        trash = folder_store.create_folder(db, test_user.id, "Trash")
        record = record_store.create_record(db, folder.id)

        moved = record_store.update_record_folder(db, record.id, trash.id, origin_folder_id=folder.id)
        assert moved.folder_id == trash.id
        assert moved.origin_folder_id == folder.id

    def test_update_record_folder_missing_record(self, db: Session, folder):
        with pytest.raises(RowNotFoundError):
            record_store.update_record_folder(db, uuid4(), folder.id)

    def test_update_does_not_touch_last_accessed(self, db: Session, folder):
        record = record_store.create_record(db, folder.id)
        accessed = record.last_accessed_at

        updated = record_store.update_record(db, record, is_starred=True, description="note")
        assert updated.is_starred is True
        assert updated.last_accessed_at == accessed

    def test_update_rejects_null_folder(self, db: Session, folder):
        record = record_store.create_record(db, folder.id)
        with pytest.raises(InvalidFieldError):
            record_store.update_record(db, record, folder_id=None)

    def test_delete_removes_file_metadata(self, db: Session, folder):
        record = record_store.create_record(db, folder.id, file_url="https://files.example.com/b.png")
        assert record_store.delete_record(db, record.id) is True
        assert record_store.get_record_by_id(db, record.id) is None
        assert db.query(RecordFile).count() == 0

    def test_delete_missing_returns_false(self, db: Session):
        assert record_store.delete_record(db, uuid4()) is False
