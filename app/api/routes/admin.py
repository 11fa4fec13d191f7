"""
Admin routes: dashboard statistics and operational endpoints.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user
from app.core.database import get_db
from app.models.application import APPLICATION_STATUS_FAILED, APPLICATION_STATUS_SENT, JobApplication
from app.models.credits import TRANSACTION_PURCHASE, CreditTransaction
from app.models.job import JOB_STATUS_ACTIVE, Job
from app.models.notification_token import NotificationToken
from app.models.subscription import SUBSCRIPTION_ACTIVE, UserSubscription
from app.models.user import User
from app.services.auto_apply_service import AutoApplyService
from app.services.job_service import JobService
from app.utils.dates import start_of_day, utcnow

router = APIRouter(prefix="/dashboard", tags=["admin"])

auto_apply_service = AutoApplyService()
job_service = JobService()


class DashboardStats(BaseModel):
    total_jobs: int
    active_jobs: int
    new_jobs_today: int
    total_users: int
    new_users_today: int
    applications_sent_today: int
    failed_applications_today: int
    active_subscriptions: int
    credit_purchases_today: int
    push_tokens: int


class QueueRunResponse(BaseModel):
    users: int
    processed: int
    sent: int
    would_send: int = 0
    failed: int
    skipped: int
    errors: List[str] = []


async def _count(db: AsyncSession, stmt) -> int:
    result = await db.execute(stmt)
    return result.scalar() or 0


@router.get("/stats", response_model=DashboardStats)
async def get_dashboard_stats(
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Aggregate counts for the overview dashboard."""
    today = start_of_day(utcnow())

    return DashboardStats(
        total_jobs=await _count(db, select(func.count()).select_from(Job)),
        active_jobs=await _count(
            db, select(func.count()).select_from(Job).where(Job.status == JOB_STATUS_ACTIVE)
        ),
        new_jobs_today=await _count(
            db, select(func.count()).select_from(Job).where(Job.created_at >= today)
        ),
        total_users=await _count(
            db, select(func.count()).select_from(User).where(User.is_active == True)
        ),
        new_users_today=await _count(
            db, select(func.count()).select_from(User).where(User.created_at >= today)
        ),
        applications_sent_today=await _count(
            db,
            select(func.count()).select_from(JobApplication).where(
                JobApplication.status == APPLICATION_STATUS_SENT,
                JobApplication.sent_at >= today,
            ),
        ),
        failed_applications_today=await _count(
            db,
            select(func.count()).select_from(JobApplication).where(
                JobApplication.status == APPLICATION_STATUS_FAILED,
                JobApplication.created_at >= today,
            ),
        ),
        active_subscriptions=await _count(
            db,
            select(func.count()).select_from(UserSubscription).where(
                UserSubscription.status == SUBSCRIPTION_ACTIVE
            ),
        ),
        credit_purchases_today=await _count(
            db,
            select(func.count()).select_from(CreditTransaction).where(
                CreditTransaction.transaction_type == TRANSACTION_PURCHASE,
                CreditTransaction.created_at >= today,
            ),
        ),
        push_tokens=await _count(db, select(func.count()).select_from(NotificationToken)),
    )


@router.post("/auto-apply/run", response_model=QueueRunResponse)
async def run_auto_apply_queue(
    plan_type: Optional[str] = Query(None, description="Limit the run to one plan"),
    max_applications: int = Query(50, ge=1, le=500),
    dry_run: bool = Query(False),
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Work through the subscription auto-apply queue now."""
    result = await auto_apply_service.process_queue(
        db, plan_type=plan_type, max_applications=max_applications, dry_run=dry_run
    )
    return QueueRunResponse(**result.as_dict())


@router.post("/jobs/expire")
async def expire_jobs(
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark jobs older than the expiry window as expired."""
    expired = await job_service.expire_old_jobs(db)
    return {"expired": expired}
