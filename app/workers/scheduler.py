"""
Celery Beat scheduler configuration.

Defines periodic tasks that run on a schedule (all times UTC):
- Daily job summary push at 08:00, match digests at 18:00
- CV tips Monday, interview tips Thursday, a weekly tip on Sunday
- Subscription auto-apply queue every hour
- Job expiry, daily credit top-up and subscription usage reset overnight

The same broadcasts can also be triggered over HTTP by an external
scheduler using the cron key.
"""
from celery.schedules import crontab

from app.workers.celery_app import celery_app
from app.workers.tasks import run_async
from app.core.database import async_session_maker
from app.core.logging import get_logger

logger = get_logger(__name__)


# ─── Periodic Task Schedule ────────────────────────────────────

celery_app.conf.beat_schedule = {
    "daily-jobs-summary": {
        "task": "app.workers.scheduler.send_daily_jobs_summary",
        "schedule": crontab(hour=8, minute=0),
    },
    "daily-match-digests": {
        "task": "app.workers.scheduler.send_daily_match_digests",
        "schedule": crontab(hour=18, minute=0),
    },
    "cv-tip": {
        "task": "app.workers.scheduler.send_tip",
        "schedule": crontab(hour=10, minute=0, day_of_week="mon"),
        "args": ("cv",),
    },
    "interview-tip": {
        "task": "app.workers.scheduler.send_tip",
        "schedule": crontab(hour=10, minute=0, day_of_week="thu"),
        "args": ("interview",),
    },
    "weekly-tip": {
        "task": "app.workers.scheduler.send_tip",
        "schedule": crontab(hour=12, minute=0, day_of_week="sun"),
        "args": ("weekly",),
    },
    "process-auto-apply-queue": {
        "task": "app.workers.scheduler.process_auto_apply_queue",
        "schedule": crontab(minute=30),
    },
    "expire-old-jobs": {
        "task": "app.workers.scheduler.expire_old_jobs",
        "schedule": crontab(hour=2, minute=0),
    },
    "award-daily-credits": {
        "task": "app.workers.scheduler.award_daily_credits",
        "schedule": crontab(hour=0, minute=5),
    },
    "reset-subscription-usage": {
        "task": "app.workers.scheduler.reset_subscription_usage",
        "schedule": crontab(hour=0, minute=15),
    },
}


# ─── Push broadcasts ──────────────────────────────────────────

@celery_app.task
def send_daily_jobs_summary():
    """Push the latest job titles to every registered device."""
    return run_async(_send_daily_jobs_summary())


async def _send_daily_jobs_summary():
    from app.services.notification_service import NotificationService

    async with async_session_maker() as db:
        result = await NotificationService().send_daily_jobs_summary(db)
        return result.model_dump()


@celery_app.task
def send_daily_match_digests():
    """Tell each opted-in user how many new matches they have today."""
    return run_async(_send_daily_match_digests())


async def _send_daily_match_digests():
    from app.services.notification_service import NotificationService

    async with async_session_maker() as db:
        result = await NotificationService().send_daily_match_digests(db)
        return result.model_dump()


@celery_app.task
def send_tip(kind: str):
    return run_async(_send_tip(kind))


async def _send_tip(kind: str):
    from app.services.notification_service import NotificationService

    async with async_session_maker() as db:
        result = await NotificationService().send_tip(db, kind)
        return result.model_dump()


# ─── Auto-apply ───────────────────────────────────────────────

@celery_app.task
def process_auto_apply_queue(max_applications: int = 50):
    """
    Send queued subscription applications.

    Each user's monthly plan limit is checked inside the service.
    """
    return run_async(_process_auto_apply_queue(max_applications))


async def _process_auto_apply_queue(max_applications: int):
    from app.services.auto_apply_service import AutoApplyService

    async with async_session_maker() as db:
        result = await AutoApplyService().process_queue(db, max_applications=max_applications)
        logger.info("auto_apply_queue_processed", **result.as_dict())
        return result.as_dict()


# ─── Housekeeping ─────────────────────────────────────────────

@celery_app.task
def expire_old_jobs():
    return run_async(_expire_old_jobs())


async def _expire_old_jobs():
    from app.services.job_service import JobService

    async with async_session_maker() as db:
        return {"expired": await JobService().expire_old_jobs(db)}


@celery_app.task
def award_daily_credits():
    """Top up daily free credits. Unused daily credits do not roll over."""
    return run_async(_award_daily_credits())


async def _award_daily_credits():
    from app.services.credit_service import CreditService

    async with async_session_maker() as db:
        return {"updated": await CreditService().award_daily_credits(db)}


@celery_app.task
def reset_subscription_usage():
    """Zero monthly application counts for subscriptions past their reset date."""
    return run_async(_reset_subscription_usage())


async def _reset_subscription_usage():
    from app.services.subscription_service import SubscriptionService

    async with async_session_maker() as db:
        return {"reset": await SubscriptionService().reset_monthly_usage(db)}
