"""
Repository layer - data access abstraction.

Repositories handle all database queries, keeping SQL/ORM logic
out of the service and route layers.
"""
from app.repositories.base import BaseRepository
from app.repositories.user_repository import UserRepository
from app.repositories.onboarding_repository import OnboardingRepository
from app.repositories.job_repository import JobRepository
from app.repositories.company_repository import CompanyRepository
from app.repositories.content_repository import BlogPostRepository, CategoryPageRepository
from app.repositories.application_repository import (
    ApplicationNotificationRepository,
    ApplicationRepository,
)
from app.repositories.credit_repository import CreditRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.notification_token_repository import NotificationTokenRepository
from app.repositories.match_repository import MatchRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "OnboardingRepository",
    "JobRepository",
    "CompanyRepository",
    "BlogPostRepository",
    "CategoryPageRepository",
    "ApplicationRepository",
    "ApplicationNotificationRepository",
    "CreditRepository",
    "SubscriptionRepository",
    "NotificationTokenRepository",
    "MatchRepository",
]
