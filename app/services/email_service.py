"""Application emails via AWS SES (raw MIME, PDF attached)."""
import asyncio
import re
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

import aioboto3

from app.core.config import settings
from app.core.logging import get_logger
from app.utils.html import html_to_text

logger = get_logger(__name__)

_BACKOFF_BASE_SECONDS = 1.0


class EmailDeliveryError(RuntimeError):
    """Raised when SES rejected the message on every attempt."""


def cv_attachment_name(applicant_name: Optional[str]) -> str:
    """``Jane Doe`` -> ``Jane_Doe_CV.pdf``"""
    cleaned = re.sub(r"[^\w\s-]", "", applicant_name or "", flags=re.ASCII).strip()
    cleaned = re.sub(r"\s+", "_", cleaned)
    return f"{cleaned or 'Applicant'}_CV.pdf"


def wrap_email_html(body_html: str) -> str:
    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"></head>"
        "<body style=\"font-family: Arial, sans-serif; font-size: 14px; "
        "line-height: 1.6; color: #1f2937; max-width: 640px;\">"
        f"{body_html}"
        "<hr style=\"border: none; border-top: 1px solid #e5e7eb; margin-top: 24px;\">"
        "<p style=\"font-size: 12px; color: #6b7280;\">"
        "This application was sent via JobMeter. Reply directly to this email to reach the applicant."
        "</p></body></html>"
    )


def build_application_message(
    *,
    to_email: str,
    subject: str,
    cover_letter_html: str,
    cv_pdf: bytes,
    applicant_name: Optional[str],
    applicant_email: Optional[str],
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["Subject"] = subject
    msg["From"] = formataddr((settings.ses_sender_name, settings.ses_sender_email))
    msg["To"] = to_email
    if applicant_email:
        msg["Reply-To"] = applicant_email

    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(html_to_text(cover_letter_html), "plain", "utf-8"))
    alt.attach(MIMEText(wrap_email_html(cover_letter_html), "html", "utf-8"))
    msg.attach(alt)

    attachment = MIMEApplication(cv_pdf, _subtype="pdf")
    attachment.add_header(
        "Content-Disposition",
        "attachment",
        filename=cv_attachment_name(applicant_name),
    )
    msg.attach(attachment)
    return msg


class EmailService:
    """Sends auto-apply emails through SES."""

    def __init__(self, session: Optional[aioboto3.Session] = None):
        self._session = session or aioboto3.Session()

    async def _send_raw(self, raw: bytes) -> str:
        async with self._session.client("ses", region_name=settings.ses_region) as ses:
            response = await ses.send_raw_email(RawMessage={"Data": raw})
        return response["MessageId"]

    async def send_application(
        self,
        *,
        to_email: str,
        subject: str,
        cover_letter_html: str,
        cv_pdf: bytes,
        applicant_name: Optional[str],
        applicant_email: Optional[str],
    ) -> str:
        """
        Send one application and return the SES message id.

        Retries with exponential backoff (1s, 2s, ...) up to
        ``ses_max_retries`` attempts in total.

        Raises:
            EmailDeliveryError: Every attempt failed.
        """
        msg = build_application_message(
            to_email=to_email,
            subject=subject,
            cover_letter_html=cover_letter_html,
            cv_pdf=cv_pdf,
            applicant_name=applicant_name,
            applicant_email=applicant_email,
        )
        raw = msg.as_bytes()

        attempts = max(1, settings.ses_max_retries)
        last_error: Optional[Exception] = None
        for attempt in range(1, attempts + 1):
            try:
                message_id = await self._send_raw(raw)
                logger.info("email_sent", to=to_email, message_id=message_id, attempt=attempt)
                return message_id
            except Exception as exc:
                last_error = exc
                logger.warning("email_send_attempt_failed", to=to_email, attempt=attempt, error=str(exc))
                if attempt < attempts:
                    await asyncio.sleep(_BACKOFF_BASE_SECONDS * (2 ** (attempt - 1)))

        logger.error("email_send_failed", to=to_email, attempts=attempts, error=str(last_error))
        raise EmailDeliveryError(
            f"Failed to send email after {attempts} attempts: {last_error}"
        ) from last_error
