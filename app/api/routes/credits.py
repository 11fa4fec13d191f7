"""
Credit routes.
"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.credits import CreditDetails, CreditTransactionResponse
from app.services.credit_service import CreditService

router = APIRouter(prefix="/credits", tags=["credits"])

credit_service = CreditService()


@router.get("", response_model=CreditDetails)
async def get_credits(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Permanent, daily and total credit balance."""
    return await credit_service.get_details(db, current_user.id)


@router.get("/history", response_model=List[CreditTransactionResponse])
async def get_credit_history(
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await credit_service.history(db, current_user.id, limit=limit)
