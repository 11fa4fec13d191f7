"""Tests for push broadcasts, digests and FCM helpers."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from firebase_admin import messaging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import BadRequestException, ExternalServiceException, NotFoundException
from app.models.notification_token import NotificationToken
from app.models.user import User
from app.services.notification_service import (
    TIPS,
    NotificationService,
    daily_summary_message,
    match_digest_body,
)
from app.services.push_service import (
    BatchPushResult,
    PushResult,
    build_message,
    is_invalid_token_error,
    stringify_data,
)
from tests.mocks.mock_factories import make_job, make_match


def _push(batch: BatchPushResult | None = None, single: PushResult | None = None) -> MagicMock:
    push = MagicMock()
    push.send_many = AsyncMock(return_value=batch or BatchPushResult())
    push.send = AsyncMock(return_value=single or PushResult(success=True, message_id="m-1"))
    return push


@pytest.mark.unit
class TestMessages:
    """Message text helpers."""

    def test_daily_summary_lists_three_titles(self) -> None:
        """The body names the first three titles and counts the rest."""
        title, body = daily_summary_message(["A", "B", "C", "D", "E"])
        assert title == "5 New Jobs Posted Today! 🎉"
        assert body == "A, B, C and 2 more..."

    def test_daily_summary_short(self) -> None:
        """Three or fewer titles are listed without a remainder."""
        _, body = daily_summary_message(["A", "B"])
        assert body == "A, B"

    def test_match_digest_plural(self) -> None:
        """Singular and plural digests read correctly."""
        assert match_digest_body(1) == "You have 1 new job match! Check to apply."
        assert match_digest_body(4) == "You have 4 new job matches! Check to apply."


@pytest.mark.unit
class TestPushHelpers:
    """FCM message construction."""

    def test_stringify_data(self) -> None:
        """Data values are stringified and None becomes empty."""
        assert stringify_data({"jobCount": 3, "url": "/jobs", "x": None}) == {
            "jobCount": "3",
            "url": "/jobs",
            "x": "",
        }

    def test_build_message(self) -> None:
        """Messages carry the token, notification and web push config."""
        message = build_message("tok", "Hi", "There", {"n": 1})
        assert message.token == "tok"
        assert message.notification.title == "Hi"
        assert message.data == {"n": "1"}
        assert message.webpush.notification.vibrate == [200, 100, 200]

    def test_invalid_token_detection(self) -> None:
        """Unregistered tokens are recognised by type or message."""
        assert is_invalid_token_error(messaging.UnregisteredError("gone"))
        assert is_invalid_token_error(ValueError("messaging/registration-token-not-registered"))
        assert not is_invalid_token_error(ValueError("quota exceeded"))
        assert not is_invalid_token_error(None)


@pytest.mark.unit
class TestNotificationService:
    """Token registration and broadcasts with push mocked."""

    @pytest.mark.asyncio
    async def test_register_token_links_user(self, session: AsyncSession, user: User) -> None:
        """An anonymous token is claimed by the user who registers it later."""
        service = NotificationService(push=_push())
        await service.register_token(session, "token-abcdef-123")
        await service.register_token(session, "token-abcdef-123", user=user, platform="web")

        rows = (await session.execute(select(NotificationToken))).scalars().all()
        assert len(rows) == 1
        assert rows[0].user_id == user.id
        assert rows[0].platform == "web"

    @pytest.mark.asyncio
    async def test_send_to_token_requires_token(self) -> None:
        """Sending without a token is a bad request."""
        with pytest.raises(BadRequestException):
            await NotificationService(push=_push()).send_to_token(None, "t", "b")

    @pytest.mark.asyncio
    async def test_send_to_token_failure(self) -> None:
        """An FCM failure is an upstream error."""
        push = _push(single=PushResult(success=False, error="invalid-argument"))
        with pytest.raises(ExternalServiceException):
            await NotificationService(push=push).send_to_token("tok", "t", "b")

    @pytest.mark.asyncio
    async def test_daily_summary_removes_dead_tokens(self, session: AsyncSession) -> None:
        """Tokens FCM reports unregistered are deleted after the broadcast."""
        session.add_all(
            [
                make_job(title="Nurse"),
                NotificationToken(token="live-token-0001"),
                NotificationToken(token="dead-token-0002"),
            ]
        )
        await session.commit()
        push = _push(BatchPushResult(sent=1, failed=1, invalid_tokens=["dead-token-0002"]))

        result = await NotificationService(push=push).send_daily_jobs_summary(session)

        assert (result.sent, result.failed, result.removed_tokens) == (1, 1, 1)
        tokens = (await session.execute(select(NotificationToken.token))).scalars().all()
        assert tokens == ["live-token-0001"]
        assert push.send_many.await_args.args[1] == "1 New Jobs Posted Today! 🎉"

    @pytest.mark.asyncio
    async def test_tip_kinds(self, session: AsyncSession) -> None:
        """Known tips broadcast their copy; unknown kinds are not found."""
        session.add(NotificationToken(token="live-token-0001"))
        await session.commit()
        push = _push(BatchPushResult(sent=1))
        service = NotificationService(push=push)

        result = await service.send_tip(session, "cv")
        assert result.message == f"Tip sent: {TIPS['cv'].title}"

        with pytest.raises(NotFoundException):
            await service.send_tip(session, "salary")

    @pytest.mark.asyncio
    async def test_match_digest_marks_notified(self, session: AsyncSession, user: User) -> None:
        """Today's matches above the threshold are pushed once and marked."""
        job = make_job()
        weak_job = make_job(title="Cleaner")
        strong = make_match(user.id, job.id, score=85)
        weak = make_match(user.id, weak_job.id, score=20)
        session.add_all(
            [job, weak_job, strong, weak, NotificationToken(token="user-token-001", user_id=user.id)]
        )
        await session.commit()
        push = _push(BatchPushResult(sent=1))
        service = NotificationService(push=push)

        first = await service.send_daily_match_digests(session)
        second = await service.send_daily_match_digests(session)

        assert first.sent == 1
        assert push.send_many.await_args_list[0].args[2] == match_digest_body(1)
        assert strong.notification_sent is True
        assert weak.notification_sent is False
        assert second.sent == 0
