"""
Payment service - credit purchases through Paystack.

Flow:
  1. ``initialize`` creates a Paystack transaction and returns the hosted
     checkout URL.
  2. Paystack calls our webhook on ``charge.success``; ``handle_webhook``
     verifies the signature, re-verifies the transaction with Paystack and
     credits the user exactly once per reference.
"""
import json
import time
import uuid
from typing import Any, Dict, List, Optional

import httpx
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    BadRequestException,
    ExternalServiceException,
    InvalidPackageException,
    InvalidSignatureException,
    PaymentVerificationException,
)
from app.core.logging import get_logger
from app.core.security import verify_hmac_signature
from app.models.credits import TRANSACTION_PURCHASE
from app.models.user import User
from app.schemas.credits import CreditPackage, InitializePaymentResponse, WebhookResult
from app.services.credit_service import CreditService

logger = get_logger(__name__)

CREDIT_PACKAGES: Dict[str, CreditPackage] = {
    "package_4_credits": CreditPackage(
        id="package_4_credits",
        name="4 Credits",
        credits=4,
        price=50000,
        description="Starter pack to try premium tools",
    ),
    "package_10_credits": CreditPackage(
        id="package_10_credits",
        name="10 Credits",
        credits=10,
        price=100000,
        description="Great for trying out our premium career tools",
    ),
    "package_30_credits": CreditPackage(
        id="package_30_credits",
        name="30 Credits",
        credits=30,
        price=250000,
        description="Best value for comprehensive career development",
    ),
}


def build_reference(user_id: uuid.UUID) -> str:
    return f"credit_{user_id}_{int(time.time() * 1000)}"


class PaymentService:
    """Paystack integration. One instance per request."""

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.credit_service = CreditService()
        self._client = client

    def list_packages(self) -> List[CreditPackage]:
        return list(CREDIT_PACKAGES.values())

    def _headers(self) -> Dict[str, str]:
        if not settings.paystack_secret_key:
            raise ExternalServiceException("Payment gateway is not configured")
        return {
            "Authorization": f"Bearer {settings.paystack_secret_key}",
            "Content-Type": "application/json",
        }

    async def _request(self, method: str, path: str, **kwargs) -> Dict[str, Any]:
        url = f"{settings.paystack_base_url}{path}"
        try:
            if self._client is not None:
                response = await self._client.request(method, url, headers=self._headers(), **kwargs)
            else:
                async with httpx.AsyncClient(timeout=settings.paystack_timeout_seconds) as client:
                    response = await client.request(method, url, headers=self._headers(), **kwargs)
        except httpx.HTTPError as exc:
            logger.error("paystack_transport_error", path=path, error=str(exc))
            raise ExternalServiceException("Payment gateway unavailable") from exc

        try:
            payload = response.json()
        except ValueError:
            payload = {}
        if response.status_code >= 400 or not payload.get("status"):
            logger.error(
                "paystack_error",
                path=path,
                status_code=response.status_code,
                message=payload.get("message"),
            )
            raise ExternalServiceException(payload.get("message") or "Payment gateway error")
        return payload

    async def initialize(
        self,
        user: User,
        package_id: str,
    ) -> InitializePaymentResponse:
        """
        Start a credit purchase.

        Raises:
            InvalidPackageException: Unknown package id.
            ExternalServiceException: Paystack rejected the request.
        """
        package = CREDIT_PACKAGES.get(package_id)
        if not package:
            raise InvalidPackageException()

        reference = build_reference(user.id)
        body = {
            "email": user.email,
            "amount": package.price,
            "reference": reference,
            "metadata": {
                "user_id": str(user.id),
                "package_id": package.id,
                "credits": package.credits,
            },
            "callback_url": f"{settings.site_url}/credits/purchase-success?reference={reference}",
        }
        payload = await self._request("POST", "/transaction/initialize", json=body)
        data = payload.get("data") or {}

        logger.info(
            "payment_initialized",
            user_id=str(user.id),
            package_id=package.id,
            reference=reference,
        )
        return InitializePaymentResponse(
            authorization_url=data.get("authorization_url", ""),
            access_code=data.get("access_code"),
            reference=data.get("reference") or reference,
        )

    def verify_signature(self, raw_body: bytes, signature: Optional[str]) -> bool:
        return verify_hmac_signature(settings.paystack_secret_key, raw_body, signature)

    async def verify_transaction(self, reference: str) -> Dict[str, Any]:
        """
        Returns Paystack's transaction ``data`` when the charge succeeded.

        Raises:
            PaymentVerificationException: Any other transaction status.
        """
        payload = await self._request("GET", f"/transaction/verify/{reference}")
        data = payload.get("data") or {}
        if data.get("status") != "success":
            logger.warning("payment_not_successful", reference=reference, status=data.get("status"))
            raise PaymentVerificationException()
        return data

    async def handle_webhook(
        self,
        db: AsyncSession,
        raw_body: bytes,
        signature: Optional[str],
    ) -> WebhookResult:
        if not self.verify_signature(raw_body, signature):
            logger.warning("paystack_invalid_signature")
            raise InvalidSignatureException()

        try:
            event = json.loads(raw_body)
        except ValueError as exc:
            raise BadRequestException("Invalid webhook payload") from exc

        if event.get("event") != "charge.success":
            return WebhookResult(status="ignored")

        reference = (event.get("data") or {}).get("reference")
        if not reference:
            raise BadRequestException("Missing transaction reference")

        data = await self.verify_transaction(reference)
        metadata = data.get("metadata") or {}
        if isinstance(metadata, str):
            try:
                metadata = json.loads(metadata)
            except ValueError:
                metadata = {}

        try:
            user_id = uuid.UUID(str(metadata.get("user_id")))
            credits = int(metadata.get("credits"))
        except (TypeError, ValueError) as exc:
            logger.error("paystack_metadata_invalid", reference=reference)
            raise BadRequestException("Invalid payment metadata") from exc

        if await self.credit_service.has_transaction(db, reference, TRANSACTION_PURCHASE):
            logger.info("payment_duplicate", reference=reference)
            return WebhookResult(status="duplicate", reference=reference, user_id=user_id)

        try:
            await self.credit_service.add(
                db,
                user_id,
                credits,
                description=f"Purchased {credits} credits",
                reference_id=reference,
                transaction_type=TRANSACTION_PURCHASE,
            )
            await db.commit()
        except IntegrityError:
            # A concurrent delivery of the same charge committed first.
            await db.rollback()
            logger.info("payment_duplicate", reference=reference, concurrent=True)
            return WebhookResult(status="duplicate", reference=reference, user_id=user_id)

        logger.info("payment_processed", reference=reference, user_id=str(user_id), credits=credits)
        return WebhookResult(
            status="processed",
            reference=reference,
            credits_added=credits,
            user_id=user_id,
        )
