"""
Authentication service - local accounts with bcrypt hashes and JWT pairs.

Emails are compared case-insensitively; they are stored stripped and
lower-cased. Deactivated (deleted) accounts cannot log in or refresh.
"""
from typing import Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.security import (
    verify_password,
    hash_password,
    create_access_token,
    create_refresh_token,
    decode_token,
    verify_token_type,
)
from app.core.exceptions import (
    InvalidCredentialsException,
    EmailAlreadyExistsException,
    InvalidTokenException,
)
from app.core.logging import get_logger
from app.models.user import User
from app.repositories.credit_repository import CreditRepository
from app.repositories.user_repository import UserRepository
from app.schemas.auth import TokenResponse
from app.utils.dates import utcnow

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    def __init__(self):
        self.user_repo = UserRepository()
        self.credit_repo = CreditRepository()

    async def register(
        self,
        db: AsyncSession,
        *,
        email: str,
        password: str,
        full_name: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> TokenResponse:
        """
        Create a job-seeker account and sign it in.

        An empty credit balance is opened so the next daily award reaches
        the account. The career profile is created during onboarding.

        Raises:
            EmailAlreadyExistsException: The email belongs to any account,
                including a deactivated one.
        """
        email = normalize_email(email)
        if await self.user_repo.email_exists(db, email):
            raise EmailAlreadyExistsException()

        user = await self.user_repo.create(
            db,
            email=email,
            password_hash=hash_password(password),
            full_name=(full_name or "").strip() or None,
            phone=phone,
            last_seen_at=utcnow(),
        )
        await self.credit_repo.create(db, user_id=user.id, balance=0, daily_credits_available=0)
        await db.commit()
        logger.info("user_registered", user_id=str(user.id))

        return self._issue_tokens(user)

    async def login(
        self,
        db: AsyncSession,
        *,
        email: str,
        password: str,
    ) -> TokenResponse:
        """
        Raises:
            InvalidCredentialsException: Unknown email, wrong password or
                deactivated account. The three are indistinguishable.
        """
        user = await self.user_repo.get_active_by_email(db, normalize_email(email))

        if not user or not verify_password(password, user.password_hash):
            logger.info("login_failed")
            raise InvalidCredentialsException()

        user.last_seen_at = utcnow()
        await db.commit()

        return self._issue_tokens(user)

    async def refresh(
        self,
        db: AsyncSession,
        *,
        refresh_token: str,
    ) -> TokenResponse:
        """
        Raises:
            InvalidTokenException: Not a refresh token, expired, or the
                account is gone.
        """
        payload = decode_token(refresh_token)

        if not payload or not verify_token_type(payload, "refresh"):
            raise InvalidTokenException()

        try:
            user_id = UUID(str(payload.get("sub")))
        except ValueError as exc:
            raise InvalidTokenException() from exc

        user = await self.user_repo.get_active_by_id(db, user_id)
        if not user:
            raise InvalidTokenException()

        return self._issue_tokens(user)

    def _issue_tokens(self, user: User) -> TokenResponse:
        claims = {"sub": str(user.id)}
        return TokenResponse(
            access_token=create_access_token(claims),
            refresh_token=create_refresh_token(claims),
            expires_in=settings.access_token_expire_minutes * 60,
        )
