"""
Errors raised by the folder and record stores.

These stay inside the service layer: the hierarchy engine catches them and
raises the matching AppException from filekeeper.core.exceptions.
"""


class StoreError(Exception):
    """Base class for store-level failures."""


class InvalidFieldError(StoreError):
    """A column value violates its bounds."""


class ParentNotFoundError(StoreError):
    """parent_folder_id does not resolve to a folder."""


class CrossOwnerError(StoreError):
    """Parent folder belongs to a different user."""


class FolderNotFoundError(StoreError):
    """folder_id on a record does not resolve to a folder."""


class CategoryNotFoundError(StoreError):
    """category_id on a record does not resolve to a category."""


class RowNotFoundError(StoreError):
    """The row to update does not exist."""


class ProtectedRowError(StoreError):
    """Rename or reparent targeted a system folder."""


class DependentRowsError(StoreError):
    """Deleting the folder would orphan child folders or records."""
