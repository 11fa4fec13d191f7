"""
Auto-apply service - sends a tailored CV and cover letter to a job's
application email on the user's behalf.

Two entry points share the generate -> send -> mark flow:
  * ``apply``: user-initiated, paid with credits.
  * ``process_queue``: hourly worker for subscribers, bounded by the
    monthly allowance of their plan.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import (
    AlreadyAppliedException,
    ExternalServiceException,
    InsufficientCreditsException,
    JobNotFoundException,
    NoApplicationEmailException,
    OnboardingIncompleteException,
)
from app.core.logging import get_logger
from app.models.application import (
    APPLICATION_METHOD_AUTO,
    APPLICATION_METHOD_MANUAL,
    APPLICATION_STATUS_FAILED,
    APPLICATION_STATUS_PROCESSING,
    APPLICATION_STATUS_SENT,
    NOTIFICATION_APPLICATION_SENT,
    NOTIFICATION_MONTHLY_LIMIT_REACHED,
    JobApplication,
)
from app.models.job import Job
from app.models.onboarding import OnboardingData
from app.models.user import User
from app.repositories.application_repository import (
    ApplicationNotificationRepository,
    ApplicationRepository,
)
from app.repositories.job_repository import JobRepository
from app.repositories.match_repository import MatchRepository
from app.repositories.onboarding_repository import OnboardingRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.schemas.job import ApplyResponse
from app.services.credit_service import CreditService
from app.services.document_service import DocumentService
from app.services.email_service import EmailService
from app.utils.dates import utcnow
from app.utils.jobs import application_email, get_company_name

logger = get_logger(__name__)

MAX_RETRIES = 3


class ApplicationFailed(Exception):
    """One step of the generate/send flow failed; the row is already marked."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


@dataclass
class QueueRunResult:
    users: int = 0
    processed: int = 0
    sent: int = 0
    would_send: int = 0
    failed: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict:
        return {
            "users": self.users,
            "processed": self.processed,
            "sent": self.sent,
            "would_send": self.would_send,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": self.errors[:10],
        }


class AutoApplyService:
    """Application workflow. Service-owned commits, as each step is durable."""

    def __init__(
        self,
        documents: Optional[DocumentService] = None,
        email: Optional[EmailService] = None,
    ):
        self.documents = documents or DocumentService()
        self.email = email or EmailService()
        self.credit_service = CreditService()
        self.application_repo = ApplicationRepository()
        self.notification_repo = ApplicationNotificationRepository()
        self.job_repo = JobRepository()
        self.onboarding_repo = OnboardingRepository()
        self.subscription_repo = SubscriptionRepository()
        self.match_repo = MatchRepository()

    # ── Shared steps ────────────────────────────────────────────────────────

    async def _start_application(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_id: UUID,
        existing: Optional[JobApplication],
        *,
        method: str,
        recipient: str,
        plan_type: Optional[str] = None,
    ) -> JobApplication:
        if existing:
            existing.status = APPLICATION_STATUS_PROCESSING
            existing.application_method = method
            existing.recipient_email = recipient
            existing.retry_count = (existing.retry_count or 0) + 1
            existing.error_message = None
            if plan_type:
                existing.plan_type = plan_type
            application = existing
        else:
            application = await self.application_repo.create(
                db,
                user_id=user_id,
                job_id=job_id,
                status=APPLICATION_STATUS_PROCESSING,
                application_method=method,
                recipient_email=recipient,
                plan_type=plan_type,
                retry_count=0,
            )
        await db.commit()
        return application

    async def _fail(self, db: AsyncSession, application: JobApplication, message: str) -> ApplicationFailed:
        application.status = APPLICATION_STATUS_FAILED
        application.error_message = message
        await db.commit()
        logger.warning("application_failed", application_id=str(application.id), error=message)
        return ApplicationFailed(message)

    async def _generate_and_send(
        self,
        db: AsyncSession,
        application: JobApplication,
        profile: OnboardingData,
        job: Job,
        user: Optional[User] = None,
    ) -> str:
        """Generate the documents and email them. Returns the SES message id."""
        try:
            docs = await self.documents.generate(profile, job)
        except Exception as exc:
            raise await self._fail(db, application, f"Document generation: {exc}") from exc

        if not docs.cv_pdf or not docs.cover_letter_html:
            raise await self._fail(db, application, "Missing CV or cover letter in response")

        now = utcnow()
        application.cv_generated_at = now
        application.cover_letter_generated_at = now
        await db.commit()

        applicant_name = profile.cv_name or (user.full_name if user else None)
        applicant_email = profile.cv_email or (user.email if user else None)
        try:
            return await self.email.send_application(
                to_email=application.recipient_email,
                subject=docs.cover_letter_subject,
                cover_letter_html=docs.cover_letter_html,
                cv_pdf=docs.cv_pdf,
                applicant_name=applicant_name,
                applicant_email=applicant_email,
            )
        except Exception as exc:
            raise await self._fail(db, application, f"Email sending: {exc}") from exc

    async def _mark_sent(
        self,
        db: AsyncSession,
        application: JobApplication,
        job: Job,
        message_id: str,
    ) -> None:
        application.status = APPLICATION_STATUS_SENT
        application.ses_message_id = message_id
        application.sent_at = utcnow()
        await self.notification_repo.create(
            db,
            user_id=application.user_id,
            job_id=job.id,
            application_id=application.id,
            notification_type=NOTIFICATION_APPLICATION_SENT,
            title="Application Sent",
            message=f"Successfully applied to {job.title or 'position'} at {get_company_name(job.company)}",
        )
        await db.commit()
        logger.info(
            "application_sent",
            application_id=str(application.id),
            job_id=str(job.id),
            message_id=message_id,
        )

    # ── Manual (credit-paid) ────────────────────────────────────────────────

    async def apply(
        self,
        db: AsyncSession,
        user: User,
        job_id: UUID,
        method: str = APPLICATION_METHOD_MANUAL,
    ) -> ApplyResponse:
        """
        Apply to one job now, charging ``auto_apply_credits_cost`` on success.

        Raises:
            InsufficientCreditsException: Not enough credits.
            AlreadyAppliedException: An application was already sent.
            JobNotFoundException: Unknown job.
            NoApplicationEmailException: Job cannot be applied to by email.
            OnboardingIncompleteException: User has no profile.
            ExternalServiceException: Document generation or sending failed.
        """
        cost = settings.auto_apply_credits_cost

        credits = await self.credit_service.get_details(db, user.id)
        if credits.total < cost:
            raise InsufficientCreditsException(required_credits=cost, current_credits=credits.total)

        existing = await self.application_repo.get_for_user_job(db, user.id, job_id)
        if existing and existing.status == APPLICATION_STATUS_SENT:
            raise AlreadyAppliedException()

        job = await self.job_repo.get_by_id(db, job_id)
        if not job:
            raise JobNotFoundException()
        recipient = application_email(job.application)
        if not recipient:
            raise NoApplicationEmailException()

        profile = await self.onboarding_repo.get_by_user(db, user.id)
        if not profile:
            raise OnboardingIncompleteException()

        application = await self._start_application(
            db, user.id, job.id, existing, method=method, recipient=recipient
        )

        try:
            message_id = await self._generate_and_send(db, application, profile, job, user)
        except ApplicationFailed as exc:
            raise ExternalServiceException(
                exc.message,
                code="APPLICATION_FAILED",
                status_code=500,
                details={"application_id": str(application.id)},
            ) from exc

        await self._mark_sent(db, application, job, message_id)

        company = get_company_name(job.company)
        try:
            await self.credit_service.deduct(
                db,
                user.id,
                cost,
                description=f"Auto-apply to {job.title} at {company}",
                reference_id=str(application.id),
            )
            await db.commit()
        except Exception as exc:
            # The email is already sent; the charge is best-effort.
            logger.error(
                "credit_deduction_failed",
                application_id=str(application.id),
                user_id=str(user.id),
                error=str(exc),
            )

        return ApplyResponse(
            success=True,
            message="Application sent successfully",
            application_id=application.id,
            message_id=message_id,
            sent_at=application.sent_at,
        )

    async def list_applications(
        self,
        db: AsyncSession,
        user: User,
    ) -> List[JobApplication]:
        return await self.application_repo.list_for_user(db, user.id)

    # ── Subscription queue ──────────────────────────────────────────────────

    async def process_queue(
        self,
        db: AsyncSession,
        plan_type: Optional[str] = None,
        max_applications: int = 50,
        dry_run: bool = False,
    ) -> QueueRunResult:
        """Work through queued matches, user by user, in rank order."""
        result = QueueRunResult()
        queue = await self.match_repo.get_auto_apply_queue(db, plan_type=plan_type, limit=max_applications)

        by_user: "OrderedDict[UUID, list]" = OrderedDict()
        for match in queue:
            by_user.setdefault(match.user_id, []).append(match)
        result.users = len(by_user)

        for user_id, matches in by_user.items():
            subscription = await self.subscription_repo.get_active(db, user_id)
            if not subscription:
                result.errors.append(f"No active subscription found for user {user_id}")
                result.skipped += len(matches)
                continue

            if subscription.remaining <= 0:
                await self.notification_repo.create(
                    db,
                    user_id=user_id,
                    notification_type=NOTIFICATION_MONTHLY_LIMIT_REACHED,
                    title="Monthly Limit Reached",
                    message=(
                        "You've reached your monthly application limit "
                        f"({subscription.monthly_application_limit}). Your limit will reset on "
                        f"{subscription.monthly_reset_date}."
                    ),
                )
                await db.commit()
                result.errors.append(f"Monthly limit reached for user {user_id}")
                result.skipped += len(matches)
                continue

            profile = await self.onboarding_repo.get_by_user(db, user_id)
            if not profile:
                result.errors.append(f"No profile for user {user_id}")
                result.skipped += len(matches)
                continue

            for match in matches[:subscription.remaining]:
                existing = await self.application_repo.get_for_user_job(db, user_id, match.job_id)
                if existing and (
                    existing.status == APPLICATION_STATUS_SENT
                    or (existing.retry_count or 0) >= MAX_RETRIES
                ):
                    result.skipped += 1
                    continue

                job = await self.job_repo.get_by_id(db, match.job_id)
                recipient = application_email(job.application) if job else None
                if not job or not recipient:
                    result.failed += 1
                    result.errors.append(f"Job {match.job_id} is missing or has no email address")
                    continue

                result.processed += 1
                if dry_run:
                    result.would_send += 1
                    continue

                application = await self._start_application(
                    db,
                    user_id,
                    job.id,
                    existing,
                    method=APPLICATION_METHOD_AUTO,
                    recipient=recipient,
                    plan_type=subscription.plan_type,
                )
                try:
                    message_id = await self._generate_and_send(db, application, profile, job)
                except ApplicationFailed as exc:
                    result.failed += 1
                    result.errors.append(f"Job {job.id}: {exc.message}")
                    continue

                await self._mark_sent(db, application, job, message_id)
                subscription.applications_used_this_month = (
                    subscription.applications_used_this_month or 0
                ) + 1
                match.queued_for_auto_apply_at = None
                await db.commit()
                result.sent += 1

        logger.info(
            "auto_apply_queue_processed",
            dry_run=dry_run,
            users=result.users,
            processed=result.processed,
            sent=result.sent,
            would_send=result.would_send,
            failed=result.failed,
        )
        return result
