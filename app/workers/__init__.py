"""
Workers package - Celery tasks and background processing.
"""
from app.workers.celery_app import celery_app
from app.workers.tasks import (
    create_category_page,
    match_new_job,
    submit_to_indexnow,
)
from app.workers.scheduler import (
    award_daily_credits,
    expire_old_jobs,
    process_auto_apply_queue,
    reset_subscription_usage,
    send_daily_jobs_summary,
    send_daily_match_digests,
    send_tip,
)

__all__ = [
    "celery_app",
    "create_category_page",
    "match_new_job",
    "submit_to_indexnow",
    "award_daily_credits",
    "expire_old_jobs",
    "process_auto_apply_queue",
    "reset_subscription_usage",
    "send_daily_jobs_summary",
    "send_daily_match_digests",
    "send_tip",
]
