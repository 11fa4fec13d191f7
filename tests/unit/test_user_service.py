"""Tests for account settings, deletion and CV upload keys."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import storage
from app.core.exceptions import BadRequestException
from app.models.notification_token import NotificationToken
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.user import UserUpdate
from app.services import user_service
from app.services.user_service import UserService
from tests.mocks.mock_factories import make_profile, make_user


@pytest.mark.unit
class TestCvKeys:
    """Upload keys live under the owner's prefix."""

    def test_build_cv_key(self) -> None:
        """Filenames are reduced to a safe stem with a .pdf suffix."""
        key = storage.build_cv_key("u-1", "My CV (final).PDF", upload_id="abc")
        assert key == "cv-uploads/u-1/abc/My-CV-final.pdf"

    def test_empty_filename(self) -> None:
        """A name with nothing usable falls back to cv.pdf."""
        assert storage.build_cv_key("u-1", "???.pdf", upload_id="x").endswith("/x/cv.pdf")

    def test_key_ownership(self) -> None:
        """Another user's prefix or a traversal attempt is refused."""
        own = storage.build_cv_key("u-1", "cv.pdf")
        assert storage.key_belongs_to_user(own, "u-1")
        assert not storage.key_belongs_to_user(own, "u-2")
        assert not storage.key_belongs_to_user("cv-uploads/u-1/../u-2/cv.pdf", "u-1")


@pytest.mark.unit
class TestUserService:
    """Profile summary and account settings."""

    @pytest.mark.asyncio
    async def test_profile_summary_defaults(self, session: AsyncSession, user: User) -> None:
        """A fresh account has no credits, no plan and no finished onboarding."""
        summary = await UserService().get_profile(session, user)

        assert summary.email == user.email
        assert summary.credits_total == 0
        assert summary.subscription_plan is None
        assert summary.onboarding_completed is False

    @pytest.mark.asyncio
    async def test_profile_summary_onboarded(self, session: AsyncSession, user: User) -> None:
        """A completed career profile is reported."""
        session.add(make_profile(user.id))
        await session.commit()

        summary = await UserService().get_profile(session, user)

        assert summary.onboarding_completed is True

    @pytest.mark.asyncio
    async def test_update_profile_ignores_blanks(self, session: AsyncSession, user: User) -> None:
        """Blank fields leave the stored value alone."""
        result = await UserService().update_profile(
            session, user, UserUpdate(full_name="  ", phone=" 0803 000 0000 ")
        )

        assert result.full_name == "Ada Obi"
        assert result.phone == "0803 000 0000"

    @pytest.mark.asyncio
    async def test_change_password(self, session: AsyncSession, user: User) -> None:
        """The current password must match before a new hash is stored."""
        with patch.object(user_service, "verify_password", return_value=False):
            with pytest.raises(BadRequestException):
                await UserService().change_password(
                    session, user, current_password="nope", new_password="new-secret"
                )

        with patch.object(user_service, "verify_password", return_value=True), patch.object(
            user_service, "hash_password", return_value="hashed:new-secret"
        ):
            await UserService().change_password(
                session, user, current_password="old", new_password="new-secret"
            )

        assert user.password_hash == "hashed:new-secret"

    @pytest.mark.asyncio
    async def test_deactivate_account(self, session: AsyncSession, user: User) -> None:
        """Deletion flags the row, drops push tokens and sweeps uploads."""
        other = make_user()
        session.add(other)
        session.add(NotificationToken(token="mine", user_id=user.id))
        session.add(NotificationToken(token="theirs", user_id=other.id))
        await session.commit()

        with patch.object(
            user_service.storage, "delete_user_objects", AsyncMock(return_value=2)
        ) as sweep:
            await UserService().deactivate_account(session, user)

        sweep.assert_awaited_once_with(str(user.id))
        assert user.is_active is False
        assert user.notifications_enabled is False
        remaining = (await session.scalars(select(NotificationToken.token))).all()
        assert remaining == ["theirs"]
        assert await UserRepository().get_active_by_id(session, user.id) is None
        assert await UserRepository().email_exists(session, user.email) is True
