"""
Subscription repository.
"""
from datetime import date
from typing import Dict, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.subscription import SUBSCRIPTION_ACTIVE, UserSubscription
from app.repositories.base import BaseRepository


class SubscriptionRepository(BaseRepository[UserSubscription]):
    def __init__(self):
        super().__init__(UserSubscription)

    async def get_active(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Optional[UserSubscription]:
        result = await db.execute(
            select(UserSubscription)
            .where(
                UserSubscription.user_id == user_id,
                UserSubscription.status == SUBSCRIPTION_ACTIVE,
            )
            .order_by(UserSubscription.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_active_for_users(
        self,
        db: AsyncSession,
        user_ids: Sequence[UUID],
    ) -> Dict[UUID, UserSubscription]:
        if not user_ids:
            return {}
        result = await db.execute(
            select(UserSubscription).where(
                UserSubscription.user_id.in_(list(user_ids)),
                UserSubscription.status == SUBSCRIPTION_ACTIVE,
            )
        )
        return {sub.user_id: sub for sub in result.scalars().all()}

    async def get_due_for_reset(
        self,
        db: AsyncSession,
        today: date,
    ) -> List[UserSubscription]:
        result = await db.execute(
            select(UserSubscription).where(
                UserSubscription.status == SUBSCRIPTION_ACTIVE,
                UserSubscription.monthly_reset_date.isnot(None),
                UserSubscription.monthly_reset_date <= today,
            )
        )
        return list(result.scalars().all())
