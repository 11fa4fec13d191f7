"""
Onboarding repository - the per-user career profile.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.onboarding import OnboardingData
from app.models.user import User
from app.repositories.base import BaseRepository


class OnboardingRepository(BaseRepository[OnboardingData]):
    def __init__(self):
        super().__init__(OnboardingData)

    async def get_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> Optional[OnboardingData]:
        result = await db.execute(
            select(OnboardingData).where(OnboardingData.user_id == user_id)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        user_id: UUID,
        **fields,
    ) -> OnboardingData:
        existing = await self.get_by_user(db, user_id)
        if existing:
            return await self.update(db, existing, **fields)
        return await self.create(db, user_id=user_id, **fields)

    async def get_matchable_profiles(
        self,
        db: AsyncSession,
    ) -> List[OnboardingData]:
        """Profiles of active users; callers skip ones without roles or skills."""
        result = await db.execute(
            select(OnboardingData)
            .join(User, User.id == OnboardingData.user_id)
            .where(User.is_active == True)
        )
        return list(result.scalars().all())
