"""
Database models for JobMeter.

All models use UUID primary keys and include created_at/updated_at timestamps.
"""
from app.models.base import BaseModel, TimestampMixin, UUIDMixin, JSONBType
from app.models.user import User
from app.models.onboarding import OnboardingData
from app.models.job import Job
from app.models.company import Company
from app.models.content import BlogPost, CategoryPage
from app.models.application import JobApplication, ApplicationNotification
from app.models.credits import UserCredits, CreditTransaction
from app.models.subscription import UserSubscription
from app.models.notification_token import NotificationToken
from app.models.job_match import JobMatch

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    "JSONBType",
    "User",
    "OnboardingData",
    "Job",
    "Company",
    "BlogPost",
    "CategoryPage",
    "JobApplication",
    "ApplicationNotification",
    "UserCredits",
    "CreditTransaction",
    "UserSubscription",
    "NotificationToken",
    "JobMatch",
]
