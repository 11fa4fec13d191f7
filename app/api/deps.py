"""
Route dependencies: bearer-token users, admins and the scheduler key.
"""
from typing import Optional
from uuid import UUID

from fastapi import Depends, Query
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import (
    ForbiddenException,
    InvalidSignatureException,
    InvalidTokenException,
    UnauthorizedException,
)
from app.core.logging import bind_user
from app.core.security import decode_token, verify_cron_key, verify_token_type
from app.models.user import User
from app.repositories.user_repository import UserRepository

security = HTTPBearer(auto_error=False)

user_repo = UserRepository()


def _user_id_from_token(token: str) -> UUID:
    payload = decode_token(token)
    if not payload or not verify_token_type(payload, "access"):
        raise InvalidTokenException()
    try:
        return UUID(str(payload.get("sub")))
    except ValueError:
        raise InvalidTokenException()


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    The signed-in job seeker. Deactivated (deleted) accounts are rejected.

    Raises:
        UnauthorizedException: No bearer token.
        InvalidTokenException: Bad, expired or refresh token, or unknown user.
    """
    if not credentials:
        raise UnauthorizedException("Authentication required")

    user = await user_repo.get_active_by_id(db, _user_id_from_token(credentials.credentials))
    if not user:
        raise InvalidTokenException()
    bind_user(str(user.id))
    return user


async def get_admin_user(
    current_user: User = Depends(get_current_user),
) -> User:
    if not current_user.is_admin:
        raise ForbiddenException("Admin access required")
    return current_user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> Optional[User]:
    """For endpoints that also serve anonymous visitors (free tools, push opt-in)."""
    if not credentials:
        return None
    try:
        return await get_current_user(credentials, db)
    except UnauthorizedException:
        return None


async def require_cron_key(
    key: Optional[str] = Query(None, description="Scheduler shared secret"),
) -> None:
    """
    Guard for endpoints hit by the external scheduler.

    Raises:
        InvalidSignatureException: Missing or wrong ``?key=``, or no secret configured.
    """
    if not verify_cron_key(key):
        raise InvalidSignatureException("Invalid cron key")
