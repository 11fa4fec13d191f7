"""
AI career tool routes.
"""
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user, get_optional_user
from app.core.database import get_db
from app.core.rate_limit import RATE_AI, limiter
from app.models.user import User
from app.schemas.tools import (
    CareerCoachResponse,
    PromptRequest,
    PromptResponse,
    ScamDetectorRequest,
    ScamDetectorResponse,
)
from app.services.career_tools_service import CareerToolsService

router = APIRouter(prefix="/tools", tags=["tools"])

tools_service = CareerToolsService()


@router.post("/career-coach", response_model=CareerCoachResponse)
@limiter.limit(RATE_AI)
async def career_coach(
    request: Request,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Career advice built from the user's onboarding profile."""
    data = await tools_service.career_coach(db, current_user)
    return CareerCoachResponse(data=data)


@router.post("/interview-prep", response_model=PromptResponse)
@limiter.limit(RATE_AI)
async def interview_prep(
    request: Request,
    payload: PromptRequest,
    current_user: User = Depends(get_current_user),
):
    data = await tools_service.interview_prep(
        payload.prompt, temperature=payload.temperature, max_tokens=payload.max_tokens
    )
    return PromptResponse(data=data)


@router.post("/ats-review", response_model=PromptResponse)
@limiter.limit(RATE_AI)
async def ats_review(
    request: Request,
    payload: PromptRequest,
    current_user: User = Depends(get_current_user),
):
    data = await tools_service.ats_review(
        payload.prompt, temperature=payload.temperature, max_tokens=payload.max_tokens
    )
    return PromptResponse(data=data)


@router.post("/scam-detector", response_model=ScamDetectorResponse)
@limiter.limit(RATE_AI)
async def scam_detector(
    request: Request,
    payload: ScamDetectorRequest,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Rate how likely a job posting or recruiter email is a scam.

    Free for anonymous visitors; signed-in users are charged when the
    tool has a credit cost.
    """
    return await tools_service.detect_scam(db, payload, user=current_user)
