"""
Onboarding routes: CV upload, CV parsing and the saved career profile.

The client uploads the PDF straight to S3 with the presigned POST, then
asks us to extract and parse it before submitting the profile form.
"""
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.core.rate_limit import RATE_AI, RATE_CV_UPLOAD, limiter
from app.models.user import User
from app.schemas.onboarding import (
    CVExtractRequest,
    CVExtractResponse,
    CVPresignRequest,
    CVPresignResponse,
    OnboardingRequest,
    OnboardingResponse,
    ParseCVRequest,
)
from app.services.onboarding_service import OnboardingService

router = APIRouter(prefix="/onboarding", tags=["onboarding"])

onboarding_service = OnboardingService()


@router.post("/cv/presign", response_model=CVPresignResponse)
@limiter.limit(RATE_CV_UPLOAD)
async def presign_cv_upload(
    request: Request,
    payload: CVPresignRequest,
    current_user: User = Depends(get_current_user),
):
    """
    Get a presigned S3 POST for uploading a PDF CV.

    The size limit is enforced here and again by S3 via the policy.
    """
    return await onboarding_service.presign_cv_upload(current_user, payload)


@router.post("/cv/extract", response_model=CVExtractResponse)
@limiter.limit(RATE_CV_UPLOAD)
async def extract_cv_text(
    request: Request,
    payload: CVExtractRequest,
    current_user: User = Depends(get_current_user),
):
    """Pull the text out of an uploaded CV."""
    return await onboarding_service.extract_cv_text(current_user, payload.s3_key)


@router.post("/parse")
@limiter.limit(RATE_AI)
async def parse_cv(
    request: Request,
    payload: ParseCVRequest,
    current_user: User = Depends(get_current_user),
) -> Dict[str, Any]:
    """Structure CV text with the AI parser."""
    data = await onboarding_service.parse_cv_text(payload.text or "")
    return {"success": True, "data": data}


@router.post("", response_model=OnboardingResponse)
async def save_onboarding(
    payload: OnboardingRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create or replace the current user's career profile."""
    return await onboarding_service.save(db, current_user, payload)


@router.get("", response_model=OnboardingResponse)
async def get_onboarding(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await onboarding_service.get(db, current_user)
