"""Celery application configuration."""

from datetime import timedelta

from celery import Celery

from app.core.config import settings

# Create Celery instance
celery_app = Celery(
    "social_media",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
    include=["app.tasks.file_tasks"],
)

# Configure Celery
celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_track_started=True,
    task_time_limit=30 * 60,  # 30 minutes
    task_soft_time_limit=25 * 60,  # 25 minutes
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=1000,
)

# Configure Celery Beat schedule for periodic tasks
celery_app.conf.beat_schedule = {
    "remove-unused-files": {
        "task": "app.tasks.file_tasks.remove_unused_files_task",
        "schedule": timedelta(hours=settings.file_cleanup_interval_hours),
        # A pass that has not started before the next one is due is dropped
        "options": {"expires": settings.file_cleanup_interval_hours * 3600},
    },
}

celery_app.conf.task_routes = {
    "app.tasks.file_tasks.*": {"queue": "maintenance"},
}
