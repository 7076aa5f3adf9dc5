"""
Tests for the folder store.
"""
from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from filekeeper.models.user import User
from filekeeper.services import folder_store, record_store
from filekeeper.services.store_errors import (CrossOwnerError,
                                              DependentRowsError,
                                              InvalidFieldError,
                                              ParentNotFoundError,
                                              ProtectedRowError,
                                              RowNotFoundError)


class TestNormalizeFolderName:
    """Tests for folder name validation."""

    def test_trims_whitespace(self):
        assert folder_store.normalize_folder_name("  Taxes  ") == "Taxes"

    @pytest.mark.parametrize("name", [None, "", "   "])
    def test_rejects_empty(self, name):
        with pytest.raises(InvalidFieldError):
            folder_store.normalize_folder_name(name)

    def test_length_bounds(self):
        """64 characters is accepted, 65 is not."""
        assert len(folder_store.normalize_folder_name("a" * 64)) == 64
        with pytest.raises(InvalidFieldError):
            folder_store.normalize_folder_name("a" * 65)


class TestCreateFolder:
    """Tests for folder creation."""

    def test_create_root_folder(self, db: Session, test_user: User):
        folder = folder_store.create_folder(db, test_user.id, "Taxes")
        assert folder.id is not None
        assert folder.parent_folder_id is None
        assert folder.user_id == test_user.id

    def test_create_subfolder(self, db: Session, test_user: User):
        parent = folder_store.create_folder(db, test_user.id, "Taxes")
        child = folder_store.create_folder(db, test_user.id, "2025", parent.id)
        assert child.parent_folder_id == parent.id

    def test_missing_parent(self, db: Session, test_user: User):
        with pytest.raises(ParentNotFoundError):
            folder_store.create_folder(db, test_user.id, "Orphan", uuid4())

    def test_parent_of_other_user(self, db: Session, test_user: User, other_user: User):
        """A parent must belong to the same user."""
        parent = folder_store.create_folder(db, other_user.id, "Theirs")
        with pytest.raises(CrossOwnerError):
            folder_store.create_folder(db, test_user.id, "Mine", parent.id)


class TestQueries:
    """Tests for folder lookups."""

    def test_get_folder_by_name_scoped_to_user(
        self, db: Session, test_user: User, other_user: User
    ):
        mine = folder_store.create_folder(db, test_user.id, "Taxes")
        folder_store.create_folder(db, other_user.id, "Taxes")

        found = folder_store.get_folder_by_name(db, test_user.id, "Taxes")
        assert found.id == mine.id
        assert folder_store.get_folder_by_name(db, test_user.id, "Missing") is None

    def test_get_child_folders_ordered_by_name(self, db: Session, test_user: User):
        parent = folder_store.create_folder(db, test_user.id, "Home")
        folder_store.create_folder(db, test_user.id, "Kitchen", parent.id)
        folder_store.create_folder(db, test_user.id, "Garage", parent.id)
        folder_store.create_folder(db, test_user.id, "Other root")

        children = folder_store.get_child_folders(db, test_user.id, parent.id)
        assert [c.name for c in children] == ["Garage", "Kitchen"]

        roots = folder_store.get_child_folders(db, test_user.id, None)
        assert {r.name for r in roots} == {"Home", "Other root"}


class TestMutations:
    """Tests for rename, reparent and delete."""

    def test_rename(self, db: Session, test_user: User):
        folder = folder_store.create_folder(db, test_user.id, "Old")
        renamed = folder_store.rename_folder(db, folder.id, " New ")
        assert renamed.name == "New"

    def test_rename_missing_folder(self, db: Session):
        with pytest.raises(RowNotFoundError):
            folder_store.rename_folder(db, uuid4(), "Name")

    def test_rename_protected_folder(self, db: Session, test_user: User):
        trash = folder_store.create_folder(db, test_user.id, "Trash")
        with pytest.raises(ProtectedRowError):
            folder_store.rename_folder(db, trash.id, "Bin")

    def test_reparent_sets_and_clears_trashed_at(self, db: Session, test_user: User):
        a = folder_store.create_folder(db, test_user.id, "A")
        b = folder_store.create_folder(db, test_user.id, "B")

        moved = folder_store.reparent_folder(
            db, a.id, b.id, trashed_at=datetime.now(timezone.utc)
        )
        assert moved.parent_folder_id == b.id
        assert moved.trashed_at is not None

        moved = folder_store.reparent_folder(db, a.id, None)
        assert moved.parent_folder_id is None
        assert moved.trashed_at is None

    def test_delete_folder(self, db: Session, test_user: User):
        folder = folder_store.create_folder(db, test_user.id, "Temp")
        assert folder_store.delete_folder(db, folder.id) is True
        assert folder_store.get_folder_by_id(db, folder.id) is None

    def test_delete_missing_folder_returns_false(self, db: Session):
        assert folder_store.delete_folder(db, uuid4()) is False

    def test_delete_folder_with_children(self, db: Session, test_user: User):
        parent = folder_store.create_folder(db, test_user.id, "Parent")
        folder_store.create_folder(db, test_user.id, "Child", parent.id)
        with pytest.raises(DependentRowsError):
            folder_store.delete_folder(db, parent.id)

    def test_delete_folder_with_records(self, db: Session, test_user: User):
        folder = folder_store.create_folder(db, test_user.id, "Full")
        record_store.create_record(db, folder.id, name="Receipt")
        with pytest.raises(DependentRowsError):
            folder_store.delete_folder(db, folder.id)


class TestTrashedChildren:
    """Tests for the retention query."""

    def test_only_children_trashed_before_cutoff(self, db: Session, test_user: User):
        now = datetime.now(timezone.utc)
        trash = folder_store.create_folder(db, test_user.id, "Trash")
        old = folder_store.create_folder(db, test_user.id, "Old")
        new = folder_store.create_folder(db, test_user.id, "New")
        folder_store.reparent_folder(db, old.id, trash.id, trashed_at=now - timedelta(days=40))
        folder_store.reparent_folder(db, new.id, trash.id, trashed_at=now - timedelta(days=2))

        expired = folder_store.get_trashed_children_before(
            db, trash.id, now - timedelta(days=30)
        )
        assert [f.id for f in expired] == [old.id]
