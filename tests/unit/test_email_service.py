"""Tests for application email construction and SES retries."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest

from app.core.config import settings
from app.services import email_service
from app.services.email_service import (
    EmailDeliveryError,
    EmailService,
    build_application_message,
    cv_attachment_name,
)


def _send_kwargs() -> dict[str, object]:
    return {
        "to_email": "jobs@paystack.example",
        "subject": "Application for Backend Engineer",
        "cover_letter_html": "<p>Dear Hiring Manager,</p><p>I build APIs.</p>",
        "cv_pdf": b"%PDF-1.4 fake",
        "applicant_name": "Jane Doe",
        "applicant_email": "jane@example.com",
    }


@pytest.mark.unit
class TestBuildMessage:
    """MIME structure of an application email."""

    def test_attachment_name(self) -> None:
        """Names are reduced to safe characters with underscores."""
        assert cv_attachment_name("Jane Doe") == "Jane_Doe_CV.pdf"
        assert cv_attachment_name(" Jane  O'Neil ") == "Jane_ONeil_CV.pdf"
        assert cv_attachment_name(None) == "Applicant_CV.pdf"

    def test_headers_and_parts(self) -> None:
        """Reply-To reaches the applicant and the CV is attached as PDF."""
        msg = build_application_message(**_send_kwargs())  # type: ignore[arg-type]

        assert msg["To"] == "jobs@paystack.example"
        assert msg["Reply-To"] == "jane@example.com"
        assert settings.ses_sender_email in msg["From"]

        alternative, attachment = msg.get_payload()
        plain, html = alternative.get_payload()
        assert plain.get_content_type() == "text/plain"
        assert "I build APIs." in plain.get_payload(decode=True).decode()
        assert html.get_content_type() == "text/html"
        assert "sent via JobMeter" in html.get_payload(decode=True).decode()
        assert attachment.get_content_type() == "application/pdf"
        assert attachment.get_filename() == "Jane_Doe_CV.pdf"
        assert attachment.get_payload(decode=True) == b"%PDF-1.4 fake"

    def test_no_reply_to_without_applicant_email(self) -> None:
        """Reply-To is omitted when the applicant has no email."""
        kwargs = _send_kwargs()
        kwargs["applicant_email"] = None
        msg = build_application_message(**kwargs)  # type: ignore[arg-type]
        assert msg["Reply-To"] is None


@pytest.mark.unit
class TestSendApplication:
    """Retry behaviour with SES mocked."""

    @pytest.mark.asyncio
    async def test_retries_then_succeeds(self) -> None:
        """A transient failure is retried after a backoff."""
        service = EmailService()
        send_raw = AsyncMock(side_effect=[RuntimeError("Throttling"), "ses-1"])
        sleep = AsyncMock()

        with patch.object(service, "_send_raw", send_raw), patch.object(
            email_service.asyncio, "sleep", sleep
        ):
            message_id = await service.send_application(**_send_kwargs())  # type: ignore[arg-type]

        assert message_id == "ses-1"
        assert send_raw.await_count == 2
        sleep.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    async def test_gives_up(self) -> None:
        """Every attempt failing raises EmailDeliveryError."""
        service = EmailService()
        send_raw = AsyncMock(side_effect=RuntimeError("MessageRejected"))
        sleep = AsyncMock()

        with patch.object(service, "_send_raw", send_raw), patch.object(
            email_service.asyncio, "sleep", sleep
        ), patch.object(settings, "ses_max_retries", 3):
            with pytest.raises(EmailDeliveryError, match="after 3 attempts"):
                await service.send_application(**_send_kwargs())  # type: ignore[arg-type]

        assert send_raw.await_count == 3
        assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]
