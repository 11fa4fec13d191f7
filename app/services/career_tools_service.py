"""
Career tools - thin proxies over the AI layer.

Interview prep and ATS review take a ready-made prompt from the client and
return the raw completion. The career coach and scam detector build their
own prompts.
"""
import json
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import ai
from app.core.config import settings
from app.core.exceptions import (
    BadRequestException,
    ExternalServiceException,
    InsufficientCreditsException,
    ProfileNotFoundException,
)
from app.core.logging import get_logger
from app.models.onboarding import OnboardingData
from app.models.user import User
from app.repositories.onboarding_repository import OnboardingRepository
from app.schemas.tools import ScamDetectorRequest, ScamDetectorResponse
from app.services.credit_service import CreditService

logger = get_logger(__name__)

MIN_SCAM_TEXT_LENGTH = 50


def _joined(value: Any, default: str = "Not specified") -> str:
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or default
    return str(value) if value else default


def build_profile_summary(user: User, profile: OnboardingData) -> str:
    salary = "Not specified"
    if profile.salary_min and profile.salary_max:
        salary = f"${profile.salary_min} - ${profile.salary_max}"
    elif profile.salary_min or profile.salary_max:
        salary = f"${profile.salary_min or profile.salary_max}"

    lines: List[str] = [
        "User Profile Summary:",
        f"- Name: {user.full_name or 'Not provided'}",
        f"- Target Roles: {_joined(profile.target_roles)}",
        f"- Experience Level: {profile.experience_level or 'Not specified'}",
        f"- Current Skills: {_joined(profile.cv_skills)}",
        f"- Preferred Locations: {_joined(profile.preferred_locations)}",
        f"- Salary Range: {salary}",
        f"- Job Type: {profile.job_type or 'Not specified'}",
        f"- Sector: {profile.sector or 'Not specified'}",
        "",
    ]
    if profile.cv_roles:
        lines.append(f"Work Experience Roles: {_joined(profile.cv_roles)}")
    if profile.cv_summary:
        lines.append(f"Professional Summary: {profile.cv_summary}")
    if profile.cv_work_experience:
        lines.append(f"Work Experience: {json.dumps(profile.cv_work_experience, default=str)}")
    if profile.cv_education:
        lines.append(f"Education: {json.dumps(profile.cv_education, default=str)}")
    return "\n".join(lines)


class CareerToolsService:
    def __init__(self):
        self.onboarding_repo = OnboardingRepository()
        self.credit_service = CreditService()

    async def _charge(self, db: AsyncSession, user: Optional[User], cost: int, tool: str) -> None:
        if cost <= 0 or user is None:
            return
        await self.credit_service.deduct(db, user.id, cost, description=f"Used {tool}")
        await db.commit()

    async def _ensure_credits(self, db: AsyncSession, user: Optional[User], cost: int) -> None:
        if cost <= 0 or user is None:
            return
        credits = await self.credit_service.get_details(db, user.id)
        if credits.total < cost:
            raise InsufficientCreditsException(required_credits=cost, current_credits=credits.total)

    async def career_coach(
        self,
        db: AsyncSession,
        user: User,
    ) -> Dict[str, Any]:
        """
        Raises:
            ProfileNotFoundException: User has not onboarded.
            InsufficientCreditsException: Tool is paid and balance is too low.
            ExternalServiceException: The AI returned an unusable result.
        """
        profile = await self.onboarding_repo.get_by_user(db, user.id)
        if not profile:
            raise ProfileNotFoundException()

        cost = settings.career_coach_credits_cost
        await self._ensure_credits(db, user, cost)

        try:
            result = await ai.career_coach(build_profile_summary(user, profile))
        except RuntimeError as exc:
            raise ExternalServiceException(str(exc), status_code=500) from exc

        await self._charge(db, user, cost, "Career Coach")
        logger.info("career_coach_completed", user_id=str(user.id))
        return result

    async def interview_prep(
        self,
        prompt: Optional[str],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        if not prompt:
            raise BadRequestException("Prompt is required")
        return await self._run(
            prompt,
            temperature=0.7 if temperature is None else temperature,
            max_tokens=max_tokens or 4096,
            endpoint="interview_prep",
        )

    async def ats_review(
        self,
        prompt: Optional[str],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        if not prompt:
            raise BadRequestException("Prompt is required")
        return await self._run(
            prompt,
            temperature=0.2 if temperature is None else temperature,
            max_tokens=max_tokens or 8192,
            endpoint="ats_review",
        )

    async def _run(self, prompt: str, *, temperature: float, max_tokens: int, endpoint: str) -> str:
        try:
            return await ai.run_prompt(
                prompt, temperature=temperature, max_tokens=max_tokens, endpoint=endpoint
            )
        except RuntimeError as exc:
            raise ExternalServiceException(str(exc), status_code=500) from exc

    async def detect_scam(
        self,
        db: AsyncSession,
        req: ScamDetectorRequest,
        user: Optional[User] = None,
    ) -> ScamDetectorResponse:
        text = (req.text or req.email_content or req.job_posting or "").strip()
        if len(text) < MIN_SCAM_TEXT_LENGTH:
            raise BadRequestException(
                f"Please provide at least {MIN_SCAM_TEXT_LENGTH} characters to analyse"
            )

        cost = settings.scam_detector_credits_cost
        await self._ensure_credits(db, user, cost)

        try:
            result = await ai.detect_scam(text, req.company_name)
        except RuntimeError as exc:
            raise ExternalServiceException(str(exc), status_code=500) from exc

        await self._charge(db, user, cost, "Scam Detector")
        return ScamDetectorResponse(**result)
