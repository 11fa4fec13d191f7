"""
Account settings for the signed-in job seeker: the dashboard summary,
contact details, push opt-in, password and account deletion.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import storage
from app.core.exceptions import BadRequestException
from app.core.logging import get_logger
from app.core.security import hash_password, verify_password
from app.models.user import User
from app.repositories.notification_token_repository import NotificationTokenRepository
from app.repositories.onboarding_repository import OnboardingRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserProfileResponse, UserResponse, UserUpdate
from app.services.credit_service import CreditService

logger = get_logger(__name__)


class UserService:
    def __init__(self):
        self.user_repo = UserRepository()
        self.onboarding_repo = OnboardingRepository()
        self.subscription_repo = SubscriptionRepository()
        self.token_repo = NotificationTokenRepository()
        self.credit_service = CreditService()

    async def get_profile(self, db: AsyncSession, user: User) -> UserProfileResponse:
        onboarding = await self.onboarding_repo.get_by_user(db, user.id)
        balance = await self.credit_service.get_details(db, user.id)
        plan = await self.subscription_repo.get_active(db, user.id)

        summary = UserResponse.model_validate(user).model_dump()
        return UserProfileResponse(
            **summary,
            onboarding_completed=onboarding is not None and onboarding.completed_at is not None,
            credits_total=balance.total,
            subscription_plan=plan.plan_type if plan else None,
        )

    async def update_profile(
        self, db: AsyncSession, user: User, payload: UserUpdate
    ) -> UserResponse:
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if changes:
            await self.user_repo.update(db, user, **changes)
            await db.commit()
        return UserResponse.model_validate(user)

    async def update_notifications(
        self, db: AsyncSession, user: User, enabled: bool
    ) -> UserResponse:
        await self.user_repo.update(db, user, notifications_enabled=enabled)
        await db.commit()
        logger.info("notifications_toggled", user_id=str(user.id), enabled=enabled)
        return UserResponse.model_validate(user)

    async def change_password(
        self,
        db: AsyncSession,
        user: User,
        *,
        current_password: str,
        new_password: str,
    ) -> None:
        """
        Raises:
            BadRequestException: ``current_password`` does not match.
        """
        if not verify_password(current_password, user.password_hash):
            raise BadRequestException("Current password is incorrect")

        await self.user_repo.update(db, user, password_hash=hash_password(new_password))
        await db.commit()

    async def deactivate_account(self, db: AsyncSession, user: User) -> None:
        """
        Delete an account without losing application history.

        The user row is flagged inactive, which blocks login and refresh.
        Stored CVs and generated documents are removed from S3 and every
        push token is dropped so no further notifications go out.
        """
        removed_files = await storage.delete_user_objects(str(user.id))
        removed_tokens = await self.token_repo.delete_for_user(db, user.id)
        await self.user_repo.update(
            db, user, is_active=False, notifications_enabled=False
        )
        await db.commit()

        logger.info(
            "account_deactivated",
            user_id=str(user.id),
            removed_files=removed_files,
            removed_tokens=removed_tokens,
        )
