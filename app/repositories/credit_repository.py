"""
Credit repository - balances and the transaction ledger.
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.credits import CreditTransaction, UserCredits
from app.models.user import User
from app.repositories.base import BaseRepository


class CreditRepository(BaseRepository[UserCredits]):
    def __init__(self):
        super().__init__(UserCredits)

    async def get_by_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        *,
        for_update: bool = False,
    ) -> Optional[UserCredits]:
        query = select(UserCredits).where(UserCredits.user_id == user_id)
        if for_update:
            query = query.with_for_update()
        result = await db.execute(query)
        return result.scalar_one_or_none()

    async def create_missing_balances(self, db: AsyncSession) -> int:
        """Give every active user without a balance row an empty one."""
        missing = await db.scalars(
            select(User.id).where(
                User.is_active.is_(True),
                ~select(UserCredits.id).where(UserCredits.user_id == User.id).exists(),
            )
        )
        user_ids = list(missing.all())
        db.add_all(
            UserCredits(user_id=user_id, balance=0, daily_credits_available=0)
            for user_id in user_ids
        )
        await db.flush()
        return len(user_ids)

    async def get_due_for_daily_award(
        self,
        db: AsyncSession,
        today: date,
    ) -> List[UserCredits]:
        result = await db.execute(
            select(UserCredits).where(
                or_(
                    UserCredits.daily_credits_last_awarded.is_(None),
                    UserCredits.daily_credits_last_awarded < today,
                )
            )
        )
        return list(result.scalars().all())

    async def add_transaction(
        self,
        db: AsyncSession,
        **fields,
    ) -> CreditTransaction:
        transaction = CreditTransaction(**fields)
        db.add(transaction)
        await db.flush()
        return transaction

    async def list_transactions(
        self,
        db: AsyncSession,
        user_id: UUID,
        *,
        limit: int = 100,
    ) -> List[CreditTransaction]:
        result = await db.execute(
            select(CreditTransaction)
            .where(CreditTransaction.user_id == user_id)
            .order_by(CreditTransaction.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def transaction_exists(
        self,
        db: AsyncSession,
        reference_id: str,
        transaction_type: str,
    ) -> bool:
        result = await db.execute(
            select(CreditTransaction.id).where(
                CreditTransaction.reference_id == reference_id,
                CreditTransaction.transaction_type == transaction_type,
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None
