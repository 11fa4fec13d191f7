"""
Account lookups. Emails arrive already normalized by AuthService.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy import Select, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification_token import NotificationToken
from app.models.user import User
from app.repositories.base import BaseRepository


def _active(stmt: Select) -> Select:
    return stmt.where(User.is_active.is_(True))


class UserRepository(BaseRepository[User]):
    def __init__(self):
        super().__init__(User)

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        """Any account with this email, deactivated ones included."""
        return await db.scalar(select(User).where(User.email == email))

    async def get_active_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        return await db.scalar(_active(select(User).where(User.email == email)))

    async def get_active_by_id(self, db: AsyncSession, user_id: UUID) -> Optional[User]:
        return await db.scalar(_active(select(User).where(User.id == user_id)))

    async def email_exists(self, db: AsyncSession, email: str) -> bool:
        # Deleted accounts keep their email reserved.
        found = await db.scalar(select(User.id).where(User.email == email).limit(1))
        return found is not None

    async def get_notifiable_users(self, db: AsyncSession) -> List[User]:
        """Users who opted in to push and have at least one registered device."""
        has_device = (
            select(NotificationToken.id)
            .where(NotificationToken.user_id == User.id)
            .exists()
        )
        stmt = _active(
            select(User).where(User.notifications_enabled.is_(True), has_device)
        ).order_by(User.created_at)
        result = await db.scalars(stmt)
        return list(result.all())
