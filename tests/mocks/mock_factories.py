"""Factory functions returning unsaved ORM instances with sensible defaults."""

from __future__ import annotations

from datetime import timedelta
from uuid import UUID, uuid4

from app.models.credits import UserCredits
from app.models.job import JOB_STATUS_ACTIVE, Job
from app.models.job_match import JobMatch
from app.models.onboarding import OnboardingData
from app.models.subscription import PLAN_LIMITS, UserSubscription
from app.models.user import User
from app.utils.dates import utc_today, utcnow


def make_user(**overrides: object) -> User:
    """Create an active, non-admin user."""
    defaults: dict[str, object] = {
        "id": uuid4(),
        "email": f"user-{uuid4().hex[:8]}@example.com",
        "password_hash": "not-a-real-hash",
        "full_name": "Ada Obi",
        "is_active": True,
        "is_admin": False,
        "notifications_enabled": True,
    }
    defaults.update(overrides)
    return User(**defaults)  # type: ignore[arg-type]


def make_job(**overrides: object) -> Job:
    """Create an active, emailable backend job in Lagos."""
    now = utcnow()
    defaults: dict[str, object] = {
        "id": uuid4(),
        "title": "Backend Engineer",
        "role": "Backend Engineer",
        "related_roles": ["Software Engineer"],
        "sector": "Information Technology & Software",
        "company": {"name": "Paystack", "website": "https://paystack.com"},
        "location": {"city": "Ikeja", "state": "Lagos", "country": "Nigeria", "remote": False},
        "employment_type": "Full-time",
        "experience_level": "Mid-level",
        "skills_required": ["Python", "PostgreSQL"],
        "description": "<p>Build payment APIs.</p>",
        "salary_range": {"min": 400000, "max": 800000, "currency": "NGN"},
        "application": {"email": "jobs@paystack.example"},
        "source_url": None,
        "status": JOB_STATUS_ACTIVE,
        "created_at": now,
        "updated_at": now,
    }
    defaults.update(overrides)
    return Job(**defaults)  # type: ignore[arg-type]


def make_profile(user_id: UUID, **overrides: object) -> OnboardingData:
    """Create a completed profile that matches ``make_job`` strongly."""
    defaults: dict[str, object] = {
        "user_id": user_id,
        "cv_name": "Ada Obi",
        "cv_email": "ada@example.com",
        "cv_roles": ["Backend Engineer"],
        "cv_skills": ["Python", "PostgreSQL", "Docker"],
        "target_roles": ["Backend Engineer"],
        "preferred_locations": ["Lagos"],
        "salary_min": 300000,
        "experience_level": "Mid-level",
        "job_type": "Full-time",
        "sector": "Information Technology & Software",
        "completed_at": utcnow(),
    }
    defaults.update(overrides)
    return OnboardingData(**defaults)  # type: ignore[arg-type]


def make_credits(user_id: UUID, balance: int = 0, daily: int = 0) -> UserCredits:
    return UserCredits(
        user_id=user_id,
        balance=balance,
        daily_credits_available=daily,
        daily_credits_last_awarded=utc_today(),
    )


def make_subscription(user_id: UUID, plan_type: str = "Pro", used: int = 0) -> UserSubscription:
    return UserSubscription(
        user_id=user_id,
        plan_type=plan_type,
        monthly_application_limit=PLAN_LIMITS[plan_type][0],
        applications_used_this_month=used,
        monthly_reset_date=utc_today() + timedelta(days=30),
    )


def make_match(user_id: UUID, job_id: UUID, score: int = 80, **overrides: object) -> JobMatch:
    defaults: dict[str, object] = {
        "user_id": user_id,
        "job_id": job_id,
        "score": score,
        "breakdown": {},
        "computed_at": utcnow(),
    }
    defaults.update(overrides)
    return JobMatch(**defaults)  # type: ignore[arg-type]
