"""
Payment routes - Paystack credit purchases.

The webhook is unauthenticated; it is trusted only through the
HMAC-SHA512 signature over the raw request body.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.core.rate_limit import RATE_PAYMENT, limiter
from app.models.user import User
from app.schemas.credits import (
    CreditPackage,
    InitializePaymentRequest,
    InitializePaymentResponse,
    WebhookResult,
)
from app.services.payment_service import PaymentService

router = APIRouter(prefix="/payments", tags=["payments"])

payment_service = PaymentService()


@router.get("/packages", response_model=List[CreditPackage])
async def list_packages():
    """Credit packages available for purchase. Prices are in kobo."""
    return payment_service.list_packages()


@router.post("/initialize", response_model=InitializePaymentResponse)
@limiter.limit(RATE_PAYMENT)
async def initialize_payment(
    request: Request,
    payload: InitializePaymentRequest,
    current_user: User = Depends(get_current_user),
):
    """Start a Paystack checkout for a credit package."""
    return await payment_service.initialize(current_user, payload.package_id)


@router.post("/webhook", response_model=WebhookResult)
async def paystack_webhook(
    request: Request,
    x_paystack_signature: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
):
    """
    Paystack event receiver.

    Credits are added at most once per transaction reference.
    """
    raw_body = await request.body()
    return await payment_service.handle_webhook(db, raw_body, x_paystack_signature)
