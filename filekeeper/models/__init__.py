from filekeeper.db.base import Base  # noqa: F401

from .user import User  # noqa: F401
from .category import Category  # noqa: F401
from .folder import Folder  # noqa: F401
from .record import Record  # noqa: F401
from .record_file import RecordFile  # noqa: F401
