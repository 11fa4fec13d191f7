"""Tests for Paystack signature checks and webhook crediting."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import httpx
import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    ExternalServiceException,
    InvalidPackageException,
    InvalidSignatureException,
    PaymentVerificationException,
)
from app.core.security import compute_hmac_signature
from app.models.credits import CreditTransaction
from app.models.user import User
from app.services.credit_service import CreditService
from app.services.payment_service import CREDIT_PACKAGES, PaymentService

SECRET = "sk_test_secret"


def _signed(event: dict) -> tuple[bytes, str]:
    raw = json.dumps(event).encode("utf-8")
    return raw, compute_hmac_signature(SECRET, raw)


@pytest.fixture(autouse=True)
def paystack_key():
    with patch.object(settings, "paystack_secret_key", SECRET):
        yield


@pytest.mark.unit
class TestSignature:
    """HMAC-SHA512 webhook signatures."""

    def test_valid_signature(self) -> None:
        """A signature over the exact raw body verifies."""
        raw, signature = _signed({"event": "charge.success"})
        assert PaymentService().verify_signature(raw, signature) is True

    def test_tampered_body(self) -> None:
        """Any change to the body breaks the signature."""
        raw, signature = _signed({"event": "charge.success"})
        assert PaymentService().verify_signature(raw + b" ", signature) is False

    def test_missing_signature(self) -> None:
        """A missing header never verifies."""
        raw, _ = _signed({"event": "charge.success"})
        assert PaymentService().verify_signature(raw, None) is False

    def test_non_ascii_signature(self) -> None:
        """A header with non-ASCII characters is a mismatch, not a crash."""
        raw, _ = _signed({"event": "charge.success"})
        assert PaymentService().verify_signature(raw, "é" * 128) is False


@pytest.mark.unit
class TestPackages:
    """Credit packages and payment initialisation."""

    def test_list_packages(self) -> None:
        """All three packages are offered, priced in kobo."""
        packages = PaymentService().list_packages()
        assert [p.credits for p in packages] == [4, 10, 30]
        assert CREDIT_PACKAGES["package_10_credits"].price == 100000

    @pytest.mark.asyncio
    async def test_unknown_package(self, user: User) -> None:
        """An unknown package id is rejected before calling Paystack."""
        with pytest.raises(InvalidPackageException):
            await PaymentService().initialize(user, "package_999")

    @pytest.mark.asyncio
    async def test_initialize_returns_checkout_url(self, user: User) -> None:
        """The hosted checkout URL from Paystack is returned."""
        captured: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["body"] = json.loads(request.content)
            captured["auth"] = request.headers["Authorization"]
            return httpx.Response(
                200,
                json={
                    "status": True,
                    "data": {
                        "authorization_url": "https://checkout.paystack.com/abc",
                        "access_code": "abc",
                        "reference": captured["body"]["reference"],
                    },
                },
            )

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            response = await PaymentService(client=client).initialize(user, "package_4_credits")

        assert response.authorization_url == "https://checkout.paystack.com/abc"
        assert captured["auth"] == f"Bearer {SECRET}"
        assert captured["body"]["amount"] == 50000
        assert captured["body"]["metadata"] == {
            "user_id": str(user.id),
            "package_id": "package_4_credits",
            "credits": 4,
        }

    @pytest.mark.asyncio
    async def test_gateway_error(self, user: User) -> None:
        """A Paystack error surfaces as an upstream failure."""

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"status": False, "message": "Invalid key"})

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            with pytest.raises(ExternalServiceException) as exc_info:
                await PaymentService(client=client).initialize(user, "package_4_credits")
        assert exc_info.value.message == "Invalid key"


@pytest.mark.unit
class TestWebhook:
    """charge.success handling."""

    @pytest.mark.asyncio
    async def test_invalid_signature(self, session: AsyncSession) -> None:
        """A bad signature is rejected with 401."""
        raw, _ = _signed({"event": "charge.success"})
        with pytest.raises(InvalidSignatureException):
            await PaymentService().handle_webhook(session, raw, "bad")

    @pytest.mark.asyncio
    async def test_other_events_ignored(self, session: AsyncSession) -> None:
        """Events other than charge.success are acknowledged and ignored."""
        raw, signature = _signed({"event": "transfer.success", "data": {}})
        result = await PaymentService().handle_webhook(session, raw, signature)
        assert result.status == "ignored"

    @pytest.mark.asyncio
    async def test_credits_once_per_reference(self, session: AsyncSession, user: User) -> None:
        """A verified charge adds credits; a replay of it does not."""
        raw, signature = _signed({"event": "charge.success", "data": {"reference": "ref_42"}})
        service = PaymentService()
        verified = {
            "status": "success",
            "metadata": {"user_id": str(user.id), "credits": 10, "package_id": "package_10_credits"},
        }

        with patch.object(service, "verify_transaction", AsyncMock(return_value=verified)):
            first = await service.handle_webhook(session, raw, signature)
            second = await service.handle_webhook(session, raw, signature)

        assert first.status == "processed"
        assert first.credits_added == 10
        assert second.status == "duplicate"
        details = await CreditService().get_details(session, user.id)
        assert details.permanent == 10

    @pytest.mark.asyncio
    async def test_concurrent_delivery_credits_once(self, session: AsyncSession, user: User) -> None:
        """Two deliveries that both pass the replay check still credit only once."""
        user_id = user.id
        raw, signature = _signed({"event": "charge.success", "data": {"reference": "ref_race"}})
        service = PaymentService()
        verified = {
            "status": "success",
            "metadata": {"user_id": str(user_id), "credits": 4, "package_id": "package_4_credits"},
        }

        with patch.object(service, "verify_transaction", AsyncMock(return_value=verified)), patch.object(
            service.credit_service, "has_transaction", AsyncMock(return_value=False)
        ):
            first = await service.handle_webhook(session, raw, signature)
            second = await service.handle_webhook(session, raw, signature)

        assert (first.status, second.status) == ("processed", "duplicate")
        rows = (
            await session.execute(
                select(CreditTransaction).where(CreditTransaction.reference_id == "ref_race")
            )
        ).scalars().all()
        assert len(rows) == 1
        assert (await CreditService().get_details(session, user_id)).permanent == 4

    @pytest.mark.asyncio
    async def test_unsuccessful_charge(self, session: AsyncSession) -> None:
        """A transaction Paystack does not report as success is not credited."""
        raw, signature = _signed({"event": "charge.success", "data": {"reference": "ref_7"}})
        service = PaymentService()
        request = AsyncMock(return_value={"status": True, "data": {"status": "abandoned"}})

        with patch.object(service, "_request", request):
            with pytest.raises(PaymentVerificationException):
                await service.handle_webhook(session, raw, signature)
        request.assert_awaited_once_with("GET", "/transaction/verify/ref_7")


@pytest.mark.unit
class TestWebhookRoute:
    """POST /payments/webhook."""

    @pytest.mark.asyncio
    async def test_route_rejects_unsigned(self, client: httpx.AsyncClient) -> None:
        """The route passes the raw body and header to the service."""
        response = await client.post("/api/v1/payments/webhook", content=b'{"event": "x"}')
        assert response.status_code == 401
        assert response.json()["error"] == "INVALID_SIGNATURE"

    @pytest.mark.asyncio
    async def test_route_acknowledges_signed(self, client: httpx.AsyncClient) -> None:
        """A signed, irrelevant event is acknowledged."""
        raw, signature = _signed({"event": "subscription.create"})
        response = await client.post(
            "/api/v1/payments/webhook",
            content=raw,
            headers={"x-paystack-signature": signature, "content-type": "application/json"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "ignored"

