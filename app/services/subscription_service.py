"""
Subscription service - plan allowances for queued auto-applies.
"""
import calendar
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.logging import get_logger
from app.models.subscription import PLAN_LIMITS, UserSubscription
from app.repositories.subscription_repository import SubscriptionRepository
from app.utils.dates import utc_today

logger = get_logger(__name__)


def add_month(value: date) -> date:
    """Same day next month, clamped to the month's last day."""
    year = value.year + (1 if value.month == 12 else 0)
    month = 1 if value.month == 12 else value.month + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


class SubscriptionService:
    def __init__(self):
        self.subscription_repo = SubscriptionRepository()

    async def get_active(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Optional[UserSubscription]:
        return await self.subscription_repo.get_active(db, user_id)

    async def reset_monthly_usage(
        self,
        db: AsyncSession,
        today: Optional[date] = None,
    ) -> int:
        """
        Zero ``applications_used_this_month`` for subscriptions whose reset
        date has arrived, and move the reset date forward past today.
        """
        today = today or utc_today()
        due = await self.subscription_repo.get_due_for_reset(db, today)
        for subscription in due:
            subscription.applications_used_this_month = 0
            next_reset = subscription.monthly_reset_date
            while next_reset <= today:
                next_reset = add_month(next_reset)
            subscription.monthly_reset_date = next_reset
            limit = PLAN_LIMITS.get(subscription.plan_type)
            if limit:
                subscription.monthly_application_limit = limit[0]
        await db.commit()

        logger.info("subscription_usage_reset", subscriptions=len(due))
        return len(due)
