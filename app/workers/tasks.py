"""
Celery tasks for background processing.

ARCHITECTURE RULE: Same as routes, tasks are thin entry points.
They do exactly 3 things:
  1. Create a DB session (since we're outside FastAPI's request cycle)
  2. Call a service method
  3. Return the result

These tasks are fired by services right after a job is inserted.
Periodic work lives in app.workers.scheduler.
"""
import asyncio
from typing import Optional
from uuid import UUID

from app.workers.celery_app import celery_app
from app.core.database import async_session_maker
from app.core.logging import get_logger

logger = get_logger(__name__)


def run_async(coro):
    """
    Helper to run async code in sync Celery tasks.

    Celery workers are synchronous. Our services are async (because
    SQLAlchemy async requires it). This bridge creates an event loop,
    runs the coroutine, and cleans up.
    """
    loop = asyncio.new_event_loop()
    asyncio.set_event_loop(loop)
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


# ── New job follow-ups ────────────────────────────────────────────────────────


@celery_app.task(bind=True, max_retries=2)
def match_new_job(self, job_id: str):
    """
    Score a new job against every onboarded profile.

    Also queues auto-apply candidates for subscribed users. Matches are
    upserted per (user, job), so a retried run does not duplicate them.
    """
    try:
        return run_async(_match_new_job(job_id))
    except Exception as exc:
        logger.warning(
            "match_new_job_retry",
            job_id=job_id,
            attempt=self.request.retries + 1,
            error=str(exc),
        )
        raise self.retry(exc=exc, countdown=2 * 2 ** self.request.retries)


async def _match_new_job(job_id: str):
    from app.services.match_service import MatchService

    match_service = MatchService()

    async with async_session_maker() as db:
        return await match_service.match_new_job(db, UUID(job_id))


@celery_app.task(bind=True, max_retries=2)
def create_category_page(self, category: str, location: Optional[str] = None):
    """Create or refresh the SEO landing page for a sector, optionally per state."""
    try:
        return run_async(_create_category_page(category, location))
    except Exception as exc:
        logger.warning(
            "category_page_retry",
            category=category,
            location=location,
            attempt=self.request.retries + 1,
            error=str(exc),
        )
        raise self.retry(exc=exc, countdown=2 * 2 ** self.request.retries)


async def _create_category_page(category: str, location: Optional[str]):
    from app.services.category_service import CategoryService

    category_service = CategoryService()

    async with async_session_maker() as db:
        page = await category_service.create_or_refresh(db, category, location)
        return {"slug": page.slug, "job_count": page.job_count}


@celery_app.task
def submit_to_indexnow(slug: str):
    """Ping IndexNow with a new job URL. Failures are logged, never retried."""
    return run_async(_submit_to_indexnow(slug))


async def _submit_to_indexnow(slug: str):
    from app.services.indexnow_service import IndexNowService

    accepted = await IndexNowService().submit(slug)
    return {"slug": slug, "accepted": accepted}
