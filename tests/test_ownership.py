"""
Tests for the ownership guard.
"""
import pytest
from sqlalchemy.orm import Session

from filekeeper.core.exceptions import ForbiddenError, OwnershipError
from filekeeper.models.user import User
from filekeeper.services import folder_store, record_store
from filekeeper.services.ownership import assert_owns, owner_of


class TestAssertOwns:
    """Tests for folder and record ownership checks."""

    def test_folder_owner_passes(self, db: Session, test_user: User):
        folder = folder_store.create_folder(db, test_user.id, "Mine")
        assert_owns(db, test_user.id, folder)

    def test_folder_of_other_user(self, db: Session, test_user: User, other_user: User):
        folder = folder_store.create_folder(db, other_user.id, "Theirs")
        with pytest.raises(OwnershipError):
            assert_owns(db, test_user.id, folder)

    def test_record_resolves_through_folder(self, db: Session, test_user: User, other_user: User):
        folder = folder_store.create_folder(db, other_user.id, "Theirs")
        record = record_store.create_record(db, folder.id, name="Secret")

        assert owner_of(db, record) == other_user.id
        with pytest.raises(OwnershipError):
            assert_owns(db, test_user.id, record)

    def test_ownership_error_is_forbidden(self):
        """OwnershipError is reported as a 403."""
        error = OwnershipError()
        assert isinstance(error, ForbiddenError)
        assert error.status_code == 403
