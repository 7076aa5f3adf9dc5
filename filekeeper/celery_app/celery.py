"""
Celery application initialization.

Creates the Celery app, loads its configuration and registers the beat
schedule for periodic maintenance.
"""

import logging

from celery import Celery
from celery.schedules import crontab

from filekeeper.celery_app.config import CeleryConfig

logger = logging.getLogger(__name__)

celery_app = Celery("filekeeper")

celery_app.config_from_object(CeleryConfig)

celery_app.autodiscover_tasks(
    [
        "filekeeper.celery_app.tasks",
    ],
    force=True,
)

celery_app.conf.beat_schedule = {
    "purge-expired-trash": {
        "task": "filekeeper.celery_app.tasks.trash.purge_expired_trash",
        "schedule": crontab(hour=2, minute=0),
    },
}
