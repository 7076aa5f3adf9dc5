"""
Celery tasks package.

- trash: periodic purge of items left in Trash past the retention window
"""

from filekeeper.celery_app.tasks.trash import purge_expired_trash_task

__all__ = [
    "purge_expired_trash_task",
]
