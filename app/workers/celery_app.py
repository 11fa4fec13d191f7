"""
Celery application for JobMeter background work.

Redis is both broker and result backend. Work is split across three
queues so a slow auto-apply run never delays new-job matching:

- ``matching``: per-job fan-out (scoring, category pages, IndexNow)
- ``auto_apply``: document generation and SES sends
- ``notifications``: FCM broadcasts and nightly housekeeping
"""
from celery import Celery
from kombu import Queue

from app.core.config import settings

celery_app = Celery(
    "jobmeter",
    broker=settings.redis_url,
    backend=f"{settings.redis_url}/1",  # Separate DB for results
)

celery_app.conf.update(
    # Serialization
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],

    # Beat schedules are in UTC
    timezone="UTC",
    enable_utc=True,

    # Task settings
    task_track_started=True,
    task_time_limit=600,  # A full queue run generates many PDFs
    task_soft_time_limit=540,

    # Worker settings
    worker_prefetch_multiplier=1,  # AI and PDF calls are slow
    task_acks_late=True,
    worker_concurrency=2,  # Bounds concurrent OpenAI and SES calls

    result_expires=3600,

    task_default_retry_delay=60,
    task_max_retries=3,

    # Routing
    task_default_queue="notifications",
    task_queues=(
        Queue("matching"),
        Queue("auto_apply"),
        Queue("notifications"),
    ),
    task_routes={
        "app.workers.tasks.*": {"queue": "matching"},
        "app.workers.scheduler.process_auto_apply_queue": {"queue": "auto_apply"},
    },
)

celery_app.conf.include = ["app.workers.tasks", "app.workers.scheduler"]
