"""Celery application for background tasks (media migrations)."""
from celery import Celery

from subdeck.core.config import settings

celery_app = Celery(
    "subdeck",
    broker=settings.CELERY_BROKER_URL,
    include=["subdeck.workers.media_migration"],
)
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
)
