"""
Push token repository.
"""
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification_token import NotificationToken
from app.repositories.base import BaseRepository


class NotificationTokenRepository(BaseRepository[NotificationToken]):
    def __init__(self):
        super().__init__(NotificationToken)

    async def get_by_token(
        self,
        db: AsyncSession,
        token: str,
    ) -> Optional[NotificationToken]:
        result = await db.execute(select(NotificationToken).where(NotificationToken.token == token))
        return result.scalar_one_or_none()

    async def all_tokens(
        self,
        db: AsyncSession,
    ) -> List[str]:
        result = await db.execute(select(NotificationToken.token))
        return list(result.scalars().all())

    async def tokens_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> List[str]:
        result = await db.execute(
            select(NotificationToken.token).where(NotificationToken.user_id == user_id)
        )
        return list(result.scalars().all())

    async def delete_tokens(
        self,
        db: AsyncSession,
        tokens: Sequence[str],
    ) -> int:
        if not tokens:
            return 0
        result = await db.execute(
            delete(NotificationToken).where(NotificationToken.token.in_(list(tokens)))
        )
        return result.rowcount or 0

    async def delete_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> int:
        result = await db.execute(
            delete(NotificationToken).where(NotificationToken.user_id == user_id)
        )
        return result.rowcount or 0
