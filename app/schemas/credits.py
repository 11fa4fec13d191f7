"""
Credit and payment schemas.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from app.schemas.base import BaseSchema, IDSchema


class CreditDetails(BaseSchema):
    permanent: int
    daily: int
    total: int


class CreditTransactionResponse(IDSchema):
    amount: int
    transaction_type: str
    description: Optional[str] = None
    reference_id: Optional[str] = None
    created_at: datetime


class CreditPackage(BaseSchema):
    id: str
    name: str
    credits: int
    price: int  # kobo
    description: str


class InitializePaymentRequest(BaseSchema):
    package_id: str


class InitializePaymentResponse(BaseSchema):
    authorization_url: str
    access_code: Optional[str] = None
    reference: str


class WebhookResult(BaseSchema):
    status: str
    reference: Optional[str] = None
    credits_added: int = 0
    user_id: Optional[UUID] = None
