"""
Celery application package for background maintenance jobs.
"""

from filekeeper.celery_app.celery import celery_app

__all__ = ["celery_app"]
