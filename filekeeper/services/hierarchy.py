"""
Hierarchy invariant engine.

Policy layer over the folder and record stores. Every operation:

1. loads current state through the stores,
2. runs the ownership guard,
3. checks the tree invariants (system folders, cycles, trash state),
4. issues the smallest set of store mutations, in a fixed order.

Store errors and SQLAlchemy errors never leave this module; they are
re-classified into the AppException taxonomy of filekeeper.core.exceptions.

State per folder or record: Active -> Trashed -> Active (restore) or
Gone (permanent delete). The engine is the only code that moves items
between those states.
"""

import logging
from collections import defaultdict
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterator, List, Optional, Set
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from filekeeper.core.config import settings
from filekeeper.core.exceptions import (AlreadyTrashedError, AppException,
                                        CycleError, InvariantViolationError,
                                        NotFoundError, NotInTrashError,
                                        OwnershipError, PartialDeleteError,
                                        ProtectedFolderError,
                                        StoreUnavailableError,
                                        UnknownVirtualFolderError,
                                        ValidationError)
from filekeeper.models.folder import Folder
from filekeeper.models.record import Record
from filekeeper.services import folder_store, record_store
from filekeeper.services.ownership import assert_owns
from filekeeper.services.store_errors import (CategoryNotFoundError,
                                              CrossOwnerError,
                                              FolderNotFoundError,
                                              InvalidFieldError,
                                              ParentNotFoundError,
                                              ProtectedRowError,
                                              RowNotFoundError, StoreError)
from filekeeper.services.system_folders import (SystemFolder,
                                                VirtualFolder,
                                                VirtualFolderView,
                                                classify_folder,
                                                is_protected_name,
                                                parse_virtual_folder)

logger = logging.getLogger(__name__)


@dataclass
class DeletionPlan:
    """Ordered ids for a permanent delete: records first, then folders innermost-out."""

    record_ids: List[UUID] = field(default_factory=list)
    folder_ids: List[UUID] = field(default_factory=list)


@dataclass
class DeletionResult:
    folders_deleted: int = 0
    records_deleted: int = 0

    def add(self, other: "DeletionResult") -> None:
        self.folders_deleted += other.folders_deleted
        self.records_deleted += other.records_deleted


def build_deletion_plan(
    root_id: UUID,
    children_by_parent: Dict[UUID, List[UUID]],
    records_by_folder: Dict[UUID, List[UUID]],
) -> DeletionPlan:
    """
    Walk a subtree and produce a leaf-first deletion order.

    Folders come out in post-order, so every folder appears after all of its
    descendants and root_id is always last.
    """
    plan = DeletionPlan()
    post_order: List[UUID] = []
    stack = [(root_id, False)]
    visited: Set[UUID] = set()

    while stack:
        folder_id, expanded = stack.pop()
        if expanded:
            post_order.append(folder_id)
            continue
        if folder_id in visited:
            raise InvariantViolationError(f"Folder {folder_id} appears twice in its own subtree")
        visited.add(folder_id)
        stack.append((folder_id, True))
        for child_id in reversed(children_by_parent.get(folder_id, [])):
            stack.append((child_id, False))

    for folder_id in post_order:
        plan.record_ids.extend(records_by_folder.get(folder_id, []))
    plan.folder_ids = post_order
    return plan


def _now() -> datetime:
    return datetime.now(timezone.utc)


class HierarchyEngine:
    """Folder and record lifecycle operations for a single request."""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Error classification
    # ------------------------------------------------------------------

    @staticmethod
    def _reclassify(exc: StoreError) -> AppException:
        if isinstance(exc, InvalidFieldError):
            return ValidationError(str(exc))
        if isinstance(exc, ParentNotFoundError):
            return NotFoundError("Parent folder not found")
        if isinstance(exc, CrossOwnerError):
            return OwnershipError()
        if isinstance(exc, FolderNotFoundError):
            return NotFoundError("Folder not found")
        if isinstance(exc, CategoryNotFoundError):
            return NotFoundError("Category not found")
        if isinstance(exc, RowNotFoundError):
            return NotFoundError(str(exc))
        if isinstance(exc, ProtectedRowError):
            return ProtectedFolderError()
        return InvariantViolationError(str(exc))

    @contextmanager
    def _store_call(self) -> Iterator[None]:
        """Translate store and database failures raised inside the block."""
        try:
            yield
        except StoreError as e:
            self.db.rollback()
            raise self._reclassify(e) from e
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Database error in hierarchy operation: {e}")
            raise StoreUnavailableError() from e

    # ------------------------------------------------------------------
    # Loading and tree helpers
    # ------------------------------------------------------------------

    def _load_folder(self, user_id: UUID, folder_id: UUID) -> Folder:
        with self._store_call():
            folder = folder_store.get_folder_by_id(self.db, folder_id)
        if folder is None:
            raise NotFoundError("Folder not found")
        with self._store_call():
            assert_owns(self.db, user_id, folder)
        return folder

    def _load_record(self, user_id: UUID, record_id: UUID) -> Record:
        with self._store_call():
            record = record_store.get_record_by_id(self.db, record_id)
        if record is None:
            raise NotFoundError("Record not found")
        with self._store_call():
            assert_owns(self.db, user_id, record)
        return record

    def _folder_index(self, user_id: UUID) -> Dict[UUID, Folder]:
        with self._store_call():
            folders = folder_store.list_folders_by_user(self.db, user_id)
        return {f.id: f for f in folders}

    @staticmethod
    def _children_map(index: Dict[UUID, Folder]) -> Dict[UUID, List[UUID]]:
        children: Dict[UUID, List[UUID]] = defaultdict(list)
        for folder in index.values():
            if folder.parent_folder_id is not None:
                children[folder.parent_folder_id].append(folder.id)
        return children

    def _ancestor_ids(self, folder: Folder, index: Dict[UUID, Folder]) -> List[UUID]:
        """
        Ancestor ids from the direct parent up to the root.

        Raises InvariantViolationError if the chain loops, runs past
        MAX_FOLDER_DEPTH, or leaves the owner's tree.
        """
        ancestors: List[UUID] = []
        seen = {folder.id}
        parent_id = folder.parent_folder_id
        while parent_id is not None:
            if parent_id in seen or len(ancestors) >= settings.MAX_FOLDER_DEPTH:
                raise InvariantViolationError(
                    f"Ancestor chain of folder {folder.id} does not terminate"
                )
            parent = index.get(parent_id)
            if parent is None:
                raise InvariantViolationError(
                    f"Folder {folder.id} has an ancestor outside its owner's tree"
                )
            ancestors.append(parent_id)
            seen.add(parent_id)
            parent_id = parent.parent_folder_id
        return ancestors

    def _subtree_ids(self, root_id: UUID, index: Dict[UUID, Folder]) -> Set[UUID]:
        children = self._children_map(index)
        subtree = {root_id}
        pending = [root_id]
        while pending:
            for child_id in children.get(pending.pop(), []):
                if child_id not in subtree:
                    subtree.add(child_id)
                    pending.append(child_id)
        return subtree

    def _trash_folder(self, user_id: UUID, required: bool = True) -> Optional[Folder]:
        with self._store_call():
            trash = folder_store.get_folder_by_name(self.db, user_id, SystemFolder.TRASH.value)
        if trash is None and required:
            logger.error(f"Trash folder missing for user {user_id}")
            raise InvariantViolationError("Trash folder is missing for this account")
        return trash

    def _trash_subtree(self, user_id: UUID, index: Optional[Dict[UUID, Folder]] = None) -> Set[UUID]:
        trash = self._trash_folder(user_id, required=False)
        if trash is None:
            return set()
        return self._subtree_ids(trash.id, index or self._folder_index(user_id))

    def _is_in_trash(self, folder: Folder, trash: Optional[Folder], index: Dict[UUID, Folder]) -> bool:
        """True when the folder sits strictly below Trash."""
        if trash is None or folder.id == trash.id:
            return False
        return trash.id in self._ancestor_ids(folder, index)

    @staticmethod
    def _reject_protected(folder: Folder) -> None:
        if is_protected_name(folder.name):
            raise ProtectedFolderError(f"'{folder.name}' is a system folder and cannot be changed")

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        try:
            clean = folder_store.normalize_folder_name(name)
        except InvalidFieldError as e:
            raise ValidationError(str(e)) from e
        if is_protected_name(clean):
            raise ProtectedFolderError(f"'{clean}' is reserved for a system folder")
        return clean

    def _resolve_folder_destination(
        self,
        user_id: UUID,
        destination_id: Optional[UUID],
        trash: Optional[Folder],
        index: Dict[UUID, Folder],
    ) -> Optional[UUID]:
        """
        Check a parent for a folder and return its id.

        None and the "All Folders" alias both mean root level. Virtual
        folders, Trash and folders already in Trash are rejected.
        """
        if destination_id is None:
            return None

        parent = self._load_folder(user_id, destination_id)
        view = classify_folder(parent)
        if isinstance(view, VirtualFolderView):
            raise ProtectedFolderError(f"'{parent.name}' cannot contain folders")
        if view.is_root_alias:
            return None
        if view.is_trash:
            raise ProtectedFolderError("Use the trash operation to move folders into Trash")
        if self._is_in_trash(parent, trash, index):
            raise ValidationError("Destination folder is in the trash")
        return parent.id

    def _resolve_record_destination(
        self,
        user_id: UUID,
        destination_id: UUID,
        trash: Optional[Folder],
        index: Dict[UUID, Folder],
    ) -> Folder:
        """Check a folder can hold records: physical, not a system folder, not trashed."""
        folder = self._load_folder(user_id, destination_id)
        view = classify_folder(folder)
        if isinstance(view, VirtualFolderView):
            raise ProtectedFolderError(f"Records cannot be placed in '{folder.name}'")
        if is_protected_name(folder.name):
            raise ProtectedFolderError(f"Records cannot be placed directly in '{folder.name}'")
        if self._is_in_trash(folder, trash, index):
            raise ValidationError("Destination folder is in the trash")
        return folder

    def _check_no_cycle(
        self, folder: Folder, new_parent_id: Optional[UUID], index: Dict[UUID, Folder]
    ) -> None:
        if new_parent_id is None:
            return
        if new_parent_id == folder.id:
            raise CycleError()
        new_parent = index.get(new_parent_id)
        if new_parent is None:
            raise NotFoundError("Parent folder not found")
        if folder.id in self._ancestor_ids(new_parent, index):
            raise CycleError()

    # ------------------------------------------------------------------
    # Folder operations
    # ------------------------------------------------------------------

    def create_subfolder(self, user_id: UUID, parent_id: Optional[UUID], name: str) -> Folder:
        """Create a content folder under parent_id, or at root level when None."""
        clean_name = self._clean_name(name)
        index = self._folder_index(user_id)
        trash = self._trash_folder(user_id, required=False)
        parent_folder_id = self._resolve_folder_destination(user_id, parent_id, trash, index)

        with self._store_call():
            folder = folder_store.create_folder(
                self.db,
                user_id=user_id,
                name=clean_name,
                parent_folder_id=parent_folder_id,
            )
        logger.info(f"Folder created: {folder.id} '{folder.name}' by user {user_id}")
        return folder

    def rename_folder(self, user_id: UUID, folder_id: UUID, new_name: str) -> Folder:
        folder = self._load_folder(user_id, folder_id)
        self._reject_protected(folder)
        clean_name = self._clean_name(new_name)

        with self._store_call():
            folder = folder_store.rename_folder(self.db, folder.id, clean_name)
        logger.info(f"Folder renamed: {folder.id} -> '{folder.name}' by user {user_id}")
        return folder

    def move_folder(self, user_id: UUID, folder_id: UUID, new_parent_id: Optional[UUID]) -> Folder:
        """Reparent an active folder; the new parent may not be inside the folder."""
        folder = self._load_folder(user_id, folder_id)
        self._reject_protected(folder)
        index = self._folder_index(user_id)
        trash = self._trash_folder(user_id, required=False)
        if self._is_in_trash(folder, trash, index):
            raise AlreadyTrashedError("Folder is in the trash; restore it instead")

        parent_folder_id = self._resolve_folder_destination(user_id, new_parent_id, trash, index)
        self._check_no_cycle(folder, parent_folder_id, index)

        with self._store_call():
            folder = folder_store.reparent_folder(self.db, folder.id, parent_folder_id)
        logger.info(f"Folder moved: {folder.id} under {parent_folder_id} by user {user_id}")
        return folder

    def move_folder_to_trash(self, user_id: UUID, folder_id: UUID) -> Folder:
        """
        Soft-delete a folder by reparenting it under Trash.

        Only the folder's own parent pointer changes; descendants and their
        records follow through the tree.
        """
        folder = self._load_folder(user_id, folder_id)
        self._reject_protected(folder)
        trash = self._trash_folder(user_id)
        index = self._folder_index(user_id)
        if self._is_in_trash(folder, trash, index):
            raise AlreadyTrashedError()

        with self._store_call():
            folder = folder_store.reparent_folder(
                self.db, folder.id, trash.id, trashed_at=_now()
            )
        logger.info(f"Folder moved to trash: {folder.id} by user {user_id}")
        return folder

    def restore_folder(
        self, user_id: UUID, folder_id: UUID, destination_parent_id: Optional[UUID]
    ) -> Folder:
        """Move a folder out of Trash to destination_parent_id (None for root level)."""
        folder = self._load_folder(user_id, folder_id)
        self._reject_protected(folder)
        trash = self._trash_folder(user_id)
        index = self._folder_index(user_id)
        if not self._is_in_trash(folder, trash, index):
            raise NotInTrashError()

        parent_folder_id = self._resolve_folder_destination(
            user_id, destination_parent_id, trash, index
        )
        self._check_no_cycle(folder, parent_folder_id, index)

        with self._store_call():
            folder = folder_store.reparent_folder(self.db, folder.id, parent_folder_id)
        logger.info(f"Folder restored: {folder.id} under {parent_folder_id} by user {user_id}")
        return folder

    def plan_folder_deletion(self, folder: Folder, index: Dict[UUID, Folder]) -> DeletionPlan:
        """Deletion plan for a folder and everything below it."""
        subtree = self._subtree_ids(folder.id, index)
        children = self._children_map(index)
        with self._store_call():
            records = record_store.get_records_by_folders(self.db, subtree)

        records_by_folder: Dict[UUID, List[UUID]] = defaultdict(list)
        for record in records:
            records_by_folder[record.folder_id].append(record.id)
        return build_deletion_plan(folder.id, children, records_by_folder)

    def execute_deletion_plan(self, plan: DeletionPlan) -> DeletionResult:
        """
        Run a deletion plan step by step.

        Rows that are already gone are skipped, so a plan can be executed again
        after an interruption. Any failure stops the run and raises
        PartialDeleteError carrying what was removed so far.
        """
        result = DeletionResult()
        try:
            for record_id in plan.record_ids:
                if record_store.delete_record(self.db, record_id):
                    result.records_deleted += 1
            for folder_id in plan.folder_ids:
                if folder_store.delete_folder(self.db, folder_id):
                    result.folders_deleted += 1
        except (StoreError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.warning(
                f"Permanent delete interrupted after {result.records_deleted} records "
                f"and {result.folders_deleted} folders: {e}"
            )
            raise PartialDeleteError(
                folders_deleted=result.folders_deleted,
                records_deleted=result.records_deleted,
            ) from e
        return result

    def permanent_delete_folder(self, user_id: UUID, folder_id: UUID) -> DeletionResult:
        """
        Remove a trashed folder, its descendants and all their records.

        Deleting an id that no longer exists is a no-op returning an empty
        result.
        """
        with self._store_call():
            folder = folder_store.get_folder_by_id(self.db, folder_id)
        if folder is None:
            logger.info(f"Permanent delete of missing folder {folder_id} skipped")
            return DeletionResult()

        with self._store_call():
            assert_owns(self.db, user_id, folder)
        self._reject_protected(folder)
        trash = self._trash_folder(user_id)
        index = self._folder_index(user_id)
        if not self._is_in_trash(folder, trash, index):
            raise NotInTrashError("Only items in the trash can be permanently deleted")

        plan = self.plan_folder_deletion(folder, index)
        result = self.execute_deletion_plan(plan)
        logger.info(
            f"Folder permanently deleted: {folder_id} "
            f"({result.folders_deleted} folders, {result.records_deleted} records) by user {user_id}"
        )
        return result

    # ------------------------------------------------------------------
    # Record operations
    # ------------------------------------------------------------------

    def move_record_to_trash(self, user_id: UUID, record_id: UUID) -> Record:
        """
        Move a record directly under Trash.

        Unlike folders the record leaves its folder; the folder it came from
        is kept in origin_folder_id for restore.
        """
        record = self._load_record(user_id, record_id)
        trash = self._trash_folder(user_id)
        if record.folder_id in self._trash_subtree(user_id):
            raise AlreadyTrashedError()

        with self._store_call():
            record = record_store.update_record_folder(
                self.db,
                record.id,
                trash.id,
                origin_folder_id=record.folder_id,
                trashed_at=_now(),
            )
        logger.info(f"Record moved to trash: {record.id} by user {user_id}")
        return record

    def restore_record(
        self, user_id: UUID, record_id: UUID, destination_folder_id: Optional[UUID] = None
    ) -> Record:
        """
        Move a record out of Trash.

        Without a destination the record goes back to the folder it was
        trashed from, provided that folder still exists outside Trash.
        """
        record = self._load_record(user_id, record_id)
        trash = self._trash_folder(user_id)
        index = self._folder_index(user_id)
        if record.folder_id not in self._subtree_ids(trash.id, index):
            raise NotInTrashError()

        if destination_folder_id is not None:
            destination = self._resolve_record_destination(
                user_id, destination_folder_id, trash, index
            )
        elif record.origin_folder_id is not None:
            try:
                destination = self._resolve_record_destination(
                    user_id, record.origin_folder_id, trash, index
                )
            except (NotFoundError, OwnershipError, ProtectedFolderError, ValidationError) as e:
                raise ValidationError(
                    "The original folder is no longer available; choose a destination"
                ) from e
        else:
            raise ValidationError("A destination folder is required to restore this record")

        with self._store_call():
            record = record_store.update_record_folder(self.db, record.id, destination.id)
        logger.info(f"Record restored: {record.id} to {destination.id} by user {user_id}")
        return record

    def permanent_delete_record(self, user_id: UUID, record_id: UUID) -> DeletionResult:
        with self._store_call():
            record = record_store.get_record_by_id(self.db, record_id)
        if record is None:
            logger.info(f"Permanent delete of missing record {record_id} skipped")
            return DeletionResult()

        with self._store_call():
            assert_owns(self.db, user_id, record)
        if record.folder_id not in self._trash_subtree(user_id):
            raise NotInTrashError("Only items in the trash can be permanently deleted")

        with self._store_call():
            deleted = record_store.delete_record(self.db, record.id)
        logger.info(f"Record permanently deleted: {record_id} by user {user_id}")
        return DeletionResult(records_deleted=1 if deleted else 0)

    def create_record(
        self,
        user_id: UUID,
        folder_id: UUID,
        file_url: Optional[str] = None,
        file_key: Optional[str] = None,
        **fields: Any,
    ) -> Record:
        """Create a record in one of the user's content folders."""
        index = self._folder_index(user_id)
        trash = self._trash_folder(user_id, required=False)
        folder = self._resolve_record_destination(user_id, folder_id, trash, index)

        with self._store_call():
            record = record_store.create_record(
                self.db, folder.id, file_url=file_url, file_key=file_key, **fields
            )
        logger.info(f"Record created: {record.id} in folder {folder.id} by user {user_id}")
        return record

    def get_record(self, user_id: UUID, record_id: UUID, touch: bool = True) -> Record:
        """Fetch a record; reading it stamps last_accessed_at unless touch is False."""
        record = self._load_record(user_id, record_id)
        if touch:
            with self._store_call():
                record = record_store.touch_record(self.db, record)
        return record

    def update_record(self, user_id: UUID, record_id: UUID, **changes: Any) -> Record:
        """
        Edit a record's metadata.

        A new folder_id must be a content folder outside Trash, and trashed
        records have to be restored before they can change folder.
        """
        record = self._load_record(user_id, record_id)

        new_folder_id = changes.pop("folder_id", None)
        if new_folder_id is not None and new_folder_id != record.folder_id:
            index = self._folder_index(user_id)
            trash = self._trash_folder(user_id, required=False)
            if trash is not None and record.folder_id in self._subtree_ids(trash.id, index):
                raise AlreadyTrashedError("Record is in the trash; restore it instead")
            destination = self._resolve_record_destination(user_id, new_folder_id, trash, index)
            changes["folder_id"] = destination.id

        with self._store_call():
            record = record_store.update_record(self.db, record, **changes)
        logger.info(f"Record updated: {record.id} by user {user_id}")
        return record

    # ------------------------------------------------------------------
    # Read projections
    # ------------------------------------------------------------------

    def get_folder(self, user_id: UUID, folder_id: UUID) -> Folder:
        return self._load_folder(user_id, folder_id)

    def get_folder_by_name(self, user_id: UUID, name: str) -> Folder:
        with self._store_call():
            folder = folder_store.get_folder_by_name(self.db, user_id, name)
        if folder is None:
            raise NotFoundError("Folder not found")
        return folder

    def list_folders(self, user_id: UUID) -> List[Folder]:
        with self._store_call():
            return folder_store.list_folders_by_user(self.db, user_id)

    def list_child_folders(self, user_id: UUID, parent_id: Optional[UUID] = None) -> List[Folder]:
        """
        Direct children of a folder.

        None lists everything at root level. "All Folders" lists the root-level
        content folders, and virtual folders never have children.
        """
        if parent_id is None:
            with self._store_call():
                return folder_store.get_child_folders(self.db, user_id, None)

        parent = self._load_folder(user_id, parent_id)
        view = classify_folder(parent)
        if isinstance(view, VirtualFolderView):
            return []
        with self._store_call():
            if view.is_root_alias:
                roots = folder_store.get_child_folders(self.db, user_id, None)
                return [f for f in roots if not is_protected_name(f.name)]
            return folder_store.get_child_folders(self.db, user_id, parent.id)

    def list_folder_records(self, user_id: UUID, folder_id: UUID) -> List[Record]:
        """Records shown in a folder; virtual folders resolve through their predicate."""
        folder = self._load_folder(user_id, folder_id)
        view = classify_folder(folder)
        if isinstance(view, VirtualFolderView):
            return self._resolve_view(user_id, view.kind)
        with self._store_call():
            return record_store.get_records_by_folder(self.db, folder.id)

    def resolve_virtual_folder(self, user_id: UUID, name: str) -> List[Record]:
        """Compute the contents of Starred, Recent or Expiring."""
        kind = parse_virtual_folder(name)
        if kind is None:
            raise UnknownVirtualFolderError(name)
        return self._resolve_view(user_id, kind)

    def _resolve_view(
        self, user_id: UUID, kind: VirtualFolder, today: Optional[date] = None
    ) -> List[Record]:
        excluded = self._trash_subtree(user_id)
        with self._store_call():
            if kind is VirtualFolder.STARRED:
                return record_store.get_starred_records(self.db, user_id, excluded)
            if kind is VirtualFolder.RECENT:
                return record_store.get_recent_records(
                    self.db, user_id, settings.RECENT_RECORDS_LIMIT, excluded
                )
            return record_store.get_expiring_records(
                self.db, user_id, settings.EXPIRING_WINDOW_DAYS, excluded, today=today
            )

    # ------------------------------------------------------------------
    # Trash retention
    # ------------------------------------------------------------------

    def purge_expired_trash(self, trash: Folder, cutoff: datetime) -> DeletionResult:
        """
        Permanently delete items placed directly in a Trash folder before cutoff.

        Records go first, then each expired folder subtree through its own
        deletion plan.
        """
        result = DeletionResult()
        with self._store_call():
            records = record_store.get_trashed_records_before(self.db, trash.id, cutoff)
            folders = folder_store.get_trashed_children_before(self.db, trash.id, cutoff)

        record_plan = DeletionPlan(record_ids=[r.id for r in records])
        result.add(self.execute_deletion_plan(record_plan))

        if folders:
            index = self._folder_index(trash.user_id)
            for folder in folders:
                result.add(self.execute_deletion_plan(self.plan_folder_deletion(folder, index)))
        return result
