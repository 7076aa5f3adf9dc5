"""
System folder registry for the hierarchy engine.

This is the single place that names the per-user system folders. Every
other component asks this module instead of comparing folder names itself:

- PROTECTED_FOLDER_NAMES: folders that can never be renamed, moved,
  trashed or deleted.
- VirtualFolder: folders whose contents are a query over records.
- classify_folder(): turns a Folder row into a PhysicalFolder or
  VirtualFolderView once, at the engine boundary.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from filekeeper.models.folder import Folder


class SystemFolder(str, Enum):
    STARRED = "Starred"
    RECENT = "Recent"
    EXPIRING = "Expiring"
    TRASH = "Trash"
    ALL_FOLDERS = "All Folders"


class VirtualFolder(str, Enum):
    STARRED = SystemFolder.STARRED.value
    RECENT = SystemFolder.RECENT.value
    EXPIRING = SystemFolder.EXPIRING.value


PROTECTED_FOLDER_NAMES = frozenset(f.value for f in SystemFolder)

# Root-level content folders every new account starts with
DEFAULT_CONTENT_FOLDERS = ("Receipts", "Warranties", "Manuals", "Coupons")


def is_protected_name(name: Optional[str]) -> bool:
    """Case-sensitive check against the protected system folder names."""
    return name in PROTECTED_FOLDER_NAMES


def parse_virtual_folder(name: str) -> Optional[VirtualFolder]:
    """Return the VirtualFolder for a name, or None if it is not virtual."""
    try:
        return VirtualFolder(name)
    except ValueError:
        return None


@dataclass(frozen=True)
class PhysicalFolder:
    folder: Folder

    @property
    def is_trash(self) -> bool:
        return self.folder.name == SystemFolder.TRASH.value

    @property
    def is_root_alias(self) -> bool:
        return self.folder.name == SystemFolder.ALL_FOLDERS.value


@dataclass(frozen=True)
class VirtualFolderView:
    folder: Folder
    kind: VirtualFolder


FolderView = Union[PhysicalFolder, VirtualFolderView]


def classify_folder(folder: Folder) -> FolderView:
    """Resolve a folder row into its physical or virtual variant."""
    kind = parse_virtual_folder(folder.name)
    if kind is not None:
        return VirtualFolderView(folder=folder, kind=kind)
    return PhysicalFolder(folder=folder)
