"""
Credit service - balances, spending and the ledger.

Two pools per user: a free daily allowance (spent first) and permanent
purchased credits. Every change writes a ``CreditTransaction``.
"""
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import InsufficientCreditsException
from app.core.logging import get_logger
from app.models.credits import (
    TRANSACTION_PURCHASE,
    TRANSACTION_USAGE,
    CreditTransaction,
    UserCredits,
)
from app.repositories.credit_repository import CreditRepository
from app.schemas.credits import CreditDetails
from app.utils.dates import utc_today

logger = get_logger(__name__)


class CreditService:
    """Handles all credit accounting. Callers own the commit."""

    def __init__(self):
        self.credit_repo = CreditRepository()

    async def get_details(
        self,
        db: AsyncSession,
        user_id: UUID,
    ) -> CreditDetails:
        credits = await self.credit_repo.get_by_user(db, user_id)
        if not credits:
            return CreditDetails(permanent=0, daily=0, total=0)
        return CreditDetails(
            permanent=credits.balance or 0,
            daily=credits.daily_credits_available or 0,
            total=credits.total,
        )

    async def history(
        self,
        db: AsyncSession,
        user_id: UUID,
        limit: int = 100,
    ) -> List[CreditTransaction]:
        return await self.credit_repo.list_transactions(db, user_id, limit=limit)

    async def deduct(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int,
        description: str,
        reference_id: Optional[str] = None,
    ) -> CreditDetails:
        """
        Spend credits, daily allowance first.

        Raises:
            InsufficientCreditsException: If the combined balance is too low.
        """
        credits = await self.credit_repo.get_by_user(db, user_id, for_update=True)
        current = credits.total if credits else 0
        if credits is None or current < amount:
            raise InsufficientCreditsException(required_credits=amount, current_credits=current)

        daily = credits.daily_credits_available or 0
        from_daily = min(daily, amount)
        from_permanent = max(0, amount - daily)

        credits.balance = (credits.balance or 0) - from_permanent
        if from_daily > 0:
            credits.daily_credits_available = daily - from_daily
            credits.daily_credits_last_used = utc_today()

        await self.credit_repo.add_transaction(
            db,
            user_id=user_id,
            amount=-amount,
            transaction_type=TRANSACTION_USAGE,
            description=description,
            reference_id=reference_id,
        )
        await db.flush()

        logger.info(
            "credits_deducted",
            user_id=str(user_id),
            amount=amount,
            from_daily=from_daily,
            from_permanent=from_permanent,
        )
        return CreditDetails(
            permanent=credits.balance,
            daily=credits.daily_credits_available,
            total=credits.total,
        )

    async def add(
        self,
        db: AsyncSession,
        user_id: UUID,
        amount: int,
        description: str,
        reference_id: Optional[str] = None,
        transaction_type: str = TRANSACTION_PURCHASE,
    ) -> CreditDetails:
        """Add permanent credits, creating the balance row if needed."""
        credits = await self.credit_repo.get_by_user(db, user_id, for_update=True)
        if credits is None:
            credits = await self.credit_repo.create(
                db,
                user_id=user_id,
                balance=0,
                daily_credits_available=0,
            )

        credits.balance = (credits.balance or 0) + amount
        await self.credit_repo.add_transaction(
            db,
            user_id=user_id,
            amount=amount,
            transaction_type=transaction_type,
            description=description,
            reference_id=reference_id,
        )
        await db.flush()

        logger.info("credits_added", user_id=str(user_id), amount=amount, type=transaction_type)
        return CreditDetails(
            permanent=credits.balance,
            daily=credits.daily_credits_available or 0,
            total=credits.total,
        )

    async def has_transaction(
        self,
        db: AsyncSession,
        reference_id: str,
        transaction_type: str = TRANSACTION_PURCHASE,
    ) -> bool:
        return await self.credit_repo.transaction_exists(db, reference_id, transaction_type)

    async def award_daily_credits(
        self,
        db: AsyncSession,
    ) -> int:
        """
        Top every balance's daily allowance up to ``daily_free_credits``.

        Active users with no balance row yet get one first. Unused daily
        credits do not accumulate. Returns rows touched.
        """
        today = utc_today()
        created = await self.credit_repo.create_missing_balances(db)
        rows: List[UserCredits] = await self.credit_repo.get_due_for_daily_award(db, today)
        for credits in rows:
            credits.daily_credits_available = max(
                credits.daily_credits_available or 0,
                settings.daily_free_credits,
            )
            credits.daily_credits_last_awarded = today
        await db.commit()

        logger.info(
            "daily_credits_awarded",
            users=len(rows),
            new_balances=created,
            amount=settings.daily_free_credits,
        )
        return len(rows)
