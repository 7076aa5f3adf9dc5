"""
Celery configuration settings.
"""

from filekeeper.core.config import settings


class CeleryConfig:
    """Celery configuration class."""

    # Broker and backend URLs
    broker_url = settings.celery_broker_url
    result_backend = settings.celery_result_backend

    # Serialization
    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # Timezone
    timezone = "UTC"
    enable_utc = True

    # Task settings
    task_track_started = True
    task_time_limit = 1800  # 30 minutes hard limit
    task_soft_time_limit = 1500

    # Result settings
    result_expires = 86400  # 24 hours

    # Worker settings
    worker_prefetch_multiplier = 1
    worker_concurrency = 1

    task_routes = {
        "filekeeper.celery_app.tasks.trash.*": {"queue": "maintenance"},
    }

    task_default_queue = "default"

    # Retry settings
    task_acks_late = True  # Acknowledge after task completion
    task_reject_on_worker_lost = True  # Requeue if worker dies


# Retry configuration for tasks
RETRY_CONFIG = {
    "max_retries": 3,
    "retry_backoff": True,  # Exponential backoff
    "retry_backoff_max": 600,  # Max 10 minutes between retries
    "retry_jitter": True,
}
