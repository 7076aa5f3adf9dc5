"""
Base task class with database session management.
"""

import logging
from typing import Optional

from celery import Task
from sqlalchemy.orm import Session

from filekeeper.db.session import SessionLocal

logger = logging.getLogger(__name__)


class DatabaseTask(Task):
    """
    Task with a lazily opened database session.

    The session is closed after every run, whatever the outcome.
    """

    _db_session: Optional[Session] = None

    @property
    def db(self) -> Session:
        if self._db_session is None:
            self._db_session = SessionLocal()
        return self._db_session

    def after_return(self, status, retval, task_id, args, kwargs, einfo):
        if self._db_session is not None:
            self._db_session.close()
            self._db_session = None
