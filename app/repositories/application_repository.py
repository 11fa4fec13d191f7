"""
Application repository - job applications and application notifications.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.application import ApplicationNotification, JobApplication
from app.repositories.base import BaseRepository


class ApplicationRepository(BaseRepository[JobApplication]):
    def __init__(self):
        super().__init__(JobApplication)

    async def get_for_user_job(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_id: UUID,
    ) -> Optional[JobApplication]:
        result = await db.execute(
            select(JobApplication).where(
                JobApplication.user_id == user_id,
                JobApplication.job_id == job_id,
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        *,
        limit: int = 100,
    ) -> List[JobApplication]:
        result = await db.execute(
            select(JobApplication)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())


class ApplicationNotificationRepository(BaseRepository[ApplicationNotification]):
    def __init__(self):
        super().__init__(ApplicationNotification)

    async def list_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        *,
        unread_only: bool = False,
        limit: int = 50,
    ) -> List[ApplicationNotification]:
        query = select(ApplicationNotification).where(ApplicationNotification.user_id == user_id)
        if unread_only:
            query = query.where(ApplicationNotification.is_read == False)
        result = await db.execute(
            query.order_by(ApplicationNotification.created_at.desc()).limit(limit)
        )
        return list(result.scalars().all())

    async def get_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        notification_id: UUID,
    ) -> Optional[ApplicationNotification]:
        result = await db.execute(
            select(ApplicationNotification).where(
                ApplicationNotification.id == notification_id,
                ApplicationNotification.user_id == user_id,
            )
        )
        return result.scalar_one_or_none()
