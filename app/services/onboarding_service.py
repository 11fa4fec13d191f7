"""
Onboarding service - CV upload, text extraction, AI parsing and the saved
career profile.

Upload flow:
  1. ``presign_cv_upload``: client gets a presigned POST and uploads the PDF
     straight to S3.
  2. ``extract_cv_text``: API downloads the object and runs pdfplumber.
  3. ``parse_cv_text``: text goes to the AI layer for structured fields.
  4. ``save``: the (user-edited) result is stored on ``onboarding_data``.
"""
import asyncio
import io
from typing import Any, Dict, Tuple

import pdfplumber
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import ai, storage
from app.core.config import settings
from app.core.exceptions import (
    BadRequestException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from app.core.logging import get_logger
from app.models.onboarding import OnboardingData
from app.models.user import User
from app.repositories.onboarding_repository import OnboardingRepository
from app.schemas.onboarding import (
    CVExtractResponse,
    CVPresignRequest,
    CVPresignResponse,
    OnboardingRequest,
)
from app.utils.dates import utcnow
from app.utils.normalize import to_numeric

logger = get_logger(__name__)

_PROFILE_FIELDS = ("full_name", "phone", "location")


def extract_pdf_text(pdf_bytes: bytes) -> Tuple[str, int]:
    """Return (text, page count). Pages are joined with newlines."""
    try:
        with pdfplumber.open(io.BytesIO(pdf_bytes)) as pdf:
            text = "\n".join(page.extract_text() or "" for page in pdf.pages)
            return text.strip(), len(pdf.pages)
    except Exception as exc:
        logger.error("pdf_parse_failed", error=str(exc))
        raise ValidationException("Failed to extract text from PDF") from exc


def _to_int(value: Any):
    number = to_numeric(value)
    return int(number) if number is not None else None


class OnboardingService:
    def __init__(self):
        self.onboarding_repo = OnboardingRepository()

    # ── CV upload ───────────────────────────────────────────────────────────

    async def presign_cv_upload(
        self,
        user: User,
        req: CVPresignRequest,
    ) -> CVPresignResponse:
        if req.file_size_bytes > settings.max_cv_size_bytes:
            raise BadRequestException(
                f"File too large. Maximum size is {settings.max_cv_size_mb} MB.",
                code="FILE_TOO_LARGE",
            )

        s3_key = storage.build_cv_key(str(user.id), req.filename)
        presign = await storage.generate_presign_upload(s3_key, settings.max_cv_size_bytes)

        logger.info("cv_presigned", user_id=str(user.id), s3_key=s3_key)
        return CVPresignResponse(
            s3_key=s3_key,
            upload_url=presign["url"],
            upload_fields=presign["fields"],
            expires_in=settings.s3_presign_upload_expires,
        )

    async def extract_cv_text(
        self,
        user: User,
        s3_key: str,
    ) -> CVExtractResponse:
        if not storage.key_belongs_to_user(s3_key, str(user.id)):
            raise ForbiddenException("CV does not belong to this user")

        pdf_bytes = await storage.download_bytes(s3_key)
        text, pages = await asyncio.to_thread(extract_pdf_text, pdf_bytes)
        if not text:
            raise ValidationException("PDF contains no extractable text")

        logger.info("cv_text_extracted", user_id=str(user.id), pages=pages, characters=len(text))
        return CVExtractResponse(text=text, pages=pages, characters=len(text))

    # ── Parsing ─────────────────────────────────────────────────────────────

    async def parse_cv_text(self, text: str) -> Dict[str, Any]:
        """
        Raises:
            BadRequestException: Empty text.
            ValidationException: The AI could not find a name and email.
        """
        if not text or not text.strip():
            raise BadRequestException("CV text is required")

        parsed = await ai.parse_cv_text(text)
        if not parsed.get("fullName") or not parsed.get("email"):
            raise ValidationException(
                "Could not extract required fields from CV",
                details={"missing": [k for k in ("fullName", "email") if not parsed.get(k)]},
            )
        return parsed

    # ── Profile ─────────────────────────────────────────────────────────────

    async def save(
        self,
        db: AsyncSession,
        user: User,
        payload: OnboardingRequest,
    ) -> OnboardingData:
        data = payload.model_dump(exclude_unset=True)

        for name in _PROFILE_FIELDS:
            value = data.pop(name, None)
            if value is not None:
                setattr(user, name, value)

        if not data.get("target_roles") and data.get("cv_roles"):
            data["target_roles"] = [str(r) for r in data["cv_roles"]]

        for name in ("salary_min", "salary_max"):
            if name in data:
                data[name] = _to_int(data[name])

        data["completed_at"] = utcnow()
        onboarding = await self.onboarding_repo.upsert(db, user.id, **data)
        await db.commit()

        logger.info("onboarding_saved", user_id=str(user.id))
        return onboarding

    async def get(
        self,
        db: AsyncSession,
        user: User,
    ) -> OnboardingData:
        onboarding = await self.onboarding_repo.get_by_user(db, user.id)
        if not onboarding:
            raise NotFoundException("Onboarding data not found", code="ONBOARDING_NOT_FOUND")
        return onboarding
