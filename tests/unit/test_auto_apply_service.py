"""Tests for the auto-apply workflow with documents and email mocked."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core import ai
from app.core.exceptions import (
    AlreadyAppliedException,
    ExternalServiceException,
    InsufficientCreditsException,
    JobNotFoundException,
    NoApplicationEmailException,
    OnboardingIncompleteException,
)
from app.models.application import (
    APPLICATION_STATUS_FAILED,
    APPLICATION_STATUS_SENT,
    NOTIFICATION_APPLICATION_SENT,
    NOTIFICATION_MONTHLY_LIMIT_REACHED,
    ApplicationNotification,
    JobApplication,
)
from app.models.user import User
from app.services.auto_apply_service import AutoApplyService
from app.services.credit_service import CreditService
from app.services.document_service import (
    DocumentGenerationError,
    DocumentService,
    GeneratedDocuments,
)
from tests.mocks.mock_factories import (
    make_credits,
    make_job,
    make_match,
    make_profile,
    make_subscription,
)


def _ai_reply(content: str) -> MagicMock:
    client = MagicMock()
    message = SimpleNamespace(content=content)
    client.chat.completions.create = AsyncMock(
        return_value=SimpleNamespace(choices=[SimpleNamespace(message=message)])
    )
    return client


def _service(send_error: Exception | None = None) -> tuple[AutoApplyService, AsyncMock, AsyncMock]:
    documents = MagicMock()
    documents.generate = AsyncMock(
        return_value=GeneratedDocuments(
            cv_pdf=b"%PDF-1.4 fake",
            cover_letter_html="<p>Dear Hiring Manager</p>",
            cover_letter_subject="Application for Backend Engineer",
        )
    )
    email = MagicMock()
    email.send_application = AsyncMock(
        side_effect=send_error, return_value=None if send_error else "ses-message-1"
    )
    return AutoApplyService(documents=documents, email=email), documents.generate, email.send_application


@pytest.mark.unit
class TestManualApply:
    """Credit-paid single applications."""

    @pytest.mark.asyncio
    async def test_sends_and_charges(self, session: AsyncSession, user: User) -> None:
        """A successful send records the application, notifies and charges."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, generate, send = _service()

        response = await service.apply(session, user, job.id)

        assert response.success is True
        assert response.message_id == "ses-message-1"
        send.assert_awaited_once()
        assert send.await_args.kwargs["to_email"] == "jobs@paystack.example"
        assert send.await_args.kwargs["cv_pdf"] == b"%PDF-1.4 fake"

        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.status == APPLICATION_STATUS_SENT
        assert application.ses_message_id == "ses-message-1"
        notification = (await session.execute(select(ApplicationNotification))).scalar_one()
        assert notification.notification_type == NOTIFICATION_APPLICATION_SENT

        details = await CreditService().get_details(session, user.id)
        assert details.total == 3

    @pytest.mark.asyncio
    async def test_insufficient_credits(self, session: AsyncSession, user: User) -> None:
        """Nothing is generated without enough credits."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=1)])
        await session.commit()
        service, generate, _ = _service()

        with pytest.raises(InsufficientCreditsException):
            await service.apply(session, user, job.id)
        generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_already_applied(self, session: AsyncSession, user: User) -> None:
        """A sent application cannot be repeated."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        session.add(
            JobApplication(user_id=user.id, job_id=job.id, status=APPLICATION_STATUS_SENT)
        )
        await session.commit()
        service, _, _ = _service()

        with pytest.raises(AlreadyAppliedException):
            await service.apply(session, user, job.id)

    @pytest.mark.asyncio
    async def test_job_without_email(self, session: AsyncSession, user: User) -> None:
        """Jobs that only take web applications are rejected."""
        job = make_job(application={"url": "https://apply.example"})
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, _, _ = _service()

        with pytest.raises(NoApplicationEmailException):
            await service.apply(session, user, job.id)

    @pytest.mark.asyncio
    async def test_needs_profile(self, session: AsyncSession, user: User) -> None:
        """A user without a profile cannot apply."""
        job = make_job()
        session.add_all([job, make_credits(user.id, balance=5)])
        await session.commit()
        service, _, _ = _service()

        with pytest.raises(OnboardingIncompleteException):
            await service.apply(session, user, job.id)

    @pytest.mark.asyncio
    async def test_send_failure_marks_failed_and_keeps_credits(
        self, session: AsyncSession, user: User
    ) -> None:
        """A failed send is recorded and nothing is charged."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, _, _ = _service(send_error=RuntimeError("SES throttled"))

        with pytest.raises(ExternalServiceException) as exc_info:
            await service.apply(session, user, job.id)

        assert exc_info.value.code == "APPLICATION_FAILED"
        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.status == APPLICATION_STATUS_FAILED
        assert "SES throttled" in application.error_message
        assert (await CreditService().get_details(session, user.id)).total == 5

    @pytest.mark.asyncio
    async def test_malformed_ai_reply_is_not_sent(self, session: AsyncSession, user: User) -> None:
        """Unparseable AI output fails the application before anything is emailed."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        email = MagicMock()
        email.send_application = AsyncMock(return_value="ses-message-1")
        service = AutoApplyService(documents=DocumentService(), email=email)

        with patch.object(ai, "_client", return_value=_ai_reply('{"summary": "trunc')):
            with pytest.raises(ExternalServiceException):
                await service.apply(session, user, job.id)

        email.send_application.assert_not_awaited()
        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.status == APPLICATION_STATUS_FAILED
        assert application.error_message.startswith("Document generation:")
        assert (await CreditService().get_details(session, user.id)).total == 5

    @pytest.mark.asyncio
    async def test_document_failure_marks_failed(self, session: AsyncSession, user: User) -> None:
        """A generation error is recorded with its step and nothing is sent."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, generate, send = _service()
        generate.side_effect = DocumentGenerationError("PDF conversion failed (429)")

        with pytest.raises(ExternalServiceException):
            await service.apply(session, user, job.id)

        send.assert_not_awaited()
        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.status == APPLICATION_STATUS_FAILED
        assert application.error_message == "Document generation: PDF conversion failed (429)"

    @pytest.mark.asyncio
    async def test_charge_failure_keeps_application_sent(
        self, session: AsyncSession, user: User
    ) -> None:
        """Once the email is out, a failed deduction does not undo the application."""
        job = make_job()
        session.add_all([job, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, _, send = _service()
        service.credit_service.deduct = AsyncMock(side_effect=RuntimeError("ledger locked"))

        response = await service.apply(session, user, job.id)

        assert response.success is True
        send.assert_awaited_once()
        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.status == APPLICATION_STATUS_SENT

    @pytest.mark.asyncio
    async def test_retry_of_failed_application(self, session: AsyncSession, user: User) -> None:
        """Retrying bumps retry_count and clears the previous error."""
        job = make_job()
        previous = JobApplication(
            user_id=user.id,
            job_id=job.id,
            status=APPLICATION_STATUS_FAILED,
            retry_count=1,
            error_message="Email sending: throttled",
        )
        session.add_all([job, previous, make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, _, _ = _service()

        await service.apply(session, user, job.id)

        application = (await session.execute(select(JobApplication))).scalar_one()
        assert application.id == previous.id
        assert application.retry_count == 2
        assert application.error_message is None
        assert application.status == APPLICATION_STATUS_SENT

    @pytest.mark.asyncio
    async def test_unknown_job(self, session: AsyncSession, user: User) -> None:
        """Applying to a job that does not exist is a 404."""
        session.add_all([make_profile(user.id), make_credits(user.id, balance=5)])
        await session.commit()
        service, generate, _ = _service()

        with pytest.raises(JobNotFoundException):
            await service.apply(session, user, uuid4())
        generate.assert_not_awaited()


@pytest.mark.unit
class TestQueue:
    """Subscription queue runs."""

    @pytest.mark.asyncio
    async def test_sends_queued_matches(self, session: AsyncSession, user: User) -> None:
        """Queued matches are sent and counted against the monthly allowance."""
        job = make_job()
        subscription = make_subscription(user.id, "Pro")
        match = make_match(
            user.id,
            job.id,
            is_auto_apply_eligible=True,
            auto_apply_rank=1,
            plan_type="Pro",
            queued_for_auto_apply_at=job.created_at,
        )
        session.add_all([job, subscription, match, make_profile(user.id)])
        await session.commit()
        service, _, send = _service()

        result = await service.process_queue(session)

        assert (result.users, result.processed, result.sent, result.failed) == (1, 1, 1, 0)
        send.assert_awaited_once()
        assert subscription.applications_used_this_month == 1
        assert match.queued_for_auto_apply_at is None

    @pytest.mark.asyncio
    async def test_dry_run_sends_nothing(self, session: AsyncSession, user: User) -> None:
        """A dry run counts what would be sent without sending."""
        job = make_job()
        match = make_match(
            user.id,
            job.id,
            is_auto_apply_eligible=True,
            auto_apply_rank=1,
            plan_type="Pro",
            queued_for_auto_apply_at=job.created_at,
        )
        session.add_all([job, make_subscription(user.id), match, make_profile(user.id)])
        await session.commit()
        service, generate, _ = _service()

        result = await service.process_queue(session, dry_run=True)

        assert (result.sent, result.would_send) == (0, 1)
        generate.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_monthly_limit_reached(self, session: AsyncSession, user: User) -> None:
        """An exhausted plan skips the user and leaves an in-app notice."""
        job = make_job()
        match = make_match(
            user.id,
            job.id,
            is_auto_apply_eligible=True,
            auto_apply_rank=1,
            plan_type="Pro",
            queued_for_auto_apply_at=job.created_at,
        )
        session.add_all([job, make_subscription(user.id, "Pro", used=15), match, make_profile(user.id)])
        await session.commit()
        service, _, send = _service()

        result = await service.process_queue(session)

        assert result.skipped == 1
        send.assert_not_awaited()
        notice = (await session.execute(select(ApplicationNotification))).scalar_one()
        assert notice.notification_type == NOTIFICATION_MONTHLY_LIMIT_REACHED

    @pytest.mark.asyncio
    async def test_no_subscription(self, session: AsyncSession, user: User) -> None:
        """Queued matches for users without a plan are skipped with an error."""
        job = make_job()
        match = make_match(
            user.id,
            job.id,
            is_auto_apply_eligible=True,
            auto_apply_rank=1,
            plan_type="Pro",
            queued_for_auto_apply_at=job.created_at,
        )
        session.add_all([job, match])
        await session.commit()
        service, _, _ = _service()

        result = await service.process_queue(session)

        assert result.skipped == 1
        assert result.errors == [f"No active subscription found for user {user.id}"]
