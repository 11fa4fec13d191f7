"""
Notification service - push broadcasts, match digests and the in-app
application notifications.

Push delivery itself lives in ``PushService``; this layer decides who
gets what and cleans up tokens FCM reports as unregistered.
"""
import random
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import BadRequestException, ExternalServiceException, NotFoundException
from app.core.logging import get_logger
from app.models.application import ApplicationNotification
from app.models.user import User
from app.repositories.application_repository import ApplicationNotificationRepository
from app.repositories.job_repository import JobRepository
from app.repositories.match_repository import MatchRepository
from app.repositories.notification_token_repository import NotificationTokenRepository
from app.repositories.user_repository import UserRepository
from app.schemas.notification import BroadcastResult
from app.services.push_service import PushService
from app.utils.dates import start_of_day, utc_today, utcnow

logger = get_logger(__name__)

DAILY_SUMMARY_JOB_LIMIT = 50


@dataclass(frozen=True)
class Tip:
    title: str
    body: str
    data: Dict[str, Any] = field(default_factory=dict)


TIPS: Dict[str, Tip] = {
    "cv": Tip(
        "📄 Improve Your CV",
        "Update your CV to stand out from other candidates and get noticed!",
        {"url": "/cv-builder", "tag": "cv-tip"},
    ),
    "interview": Tip(
        "💼 Boost Your Interview Skills",
        "Practice common interview questions and ace your next interview!",
        {"url": "/interview-practice", "tag": "interview-tip"},
    ),
}

WEEKLY_TIPS: List[Tip] = [
    Tip(
        "💼 Interview Practice",
        "Practice common interview questions to boost your confidence",
        {"url": "/interview-practice", "tag": "weekly-tip"},
    ),
    Tip(
        "📄 CV Creation",
        "Update your CV to stand out from other candidates",
        {"url": "/cv-builder", "tag": "weekly-tip"},
    ),
]

TIP_KINDS = ("cv", "interview", "weekly")


def daily_summary_message(titles: List[str]) -> tuple:
    """(title, body) for the daily new-jobs push."""
    title = f"{len(titles)} New Jobs Posted Today! 🎉"
    top = ", ".join(titles[:3])
    body = f"{top} and {len(titles) - 3} more..." if len(titles) > 3 else top
    return title, body


def match_digest_body(count: int) -> str:
    noun = "match" if count == 1 else "matches"
    return f"You have {count} new job {noun}! Check to apply."


class NotificationService:
    """Who gets notified, and with what."""

    def __init__(self, push: Optional[PushService] = None):
        self.push = push or PushService()
        self.token_repo = NotificationTokenRepository()
        self.job_repo = JobRepository()
        self.user_repo = UserRepository()
        self.match_repo = MatchRepository()
        self.notification_repo = ApplicationNotificationRepository()

    # ── Tokens ──────────────────────────────────────────────────────────────

    async def register_token(
        self,
        db: AsyncSession,
        token: str,
        user: Optional[User] = None,
        platform: Optional[str] = None,
    ) -> None:
        existing = await self.token_repo.get_by_token(db, token)
        now = utcnow()
        if existing:
            if user is not None:
                existing.user_id = user.id
            if platform:
                existing.platform = platform
            existing.last_used_at = now
        else:
            await self.token_repo.create(
                db,
                token=token,
                user_id=user.id if user else None,
                platform=platform,
                last_used_at=now,
            )
        await db.commit()
        logger.info("push_token_registered", user_id=str(user.id) if user else None)

    async def _remove_invalid(self, db: AsyncSession, tokens: List[str]) -> int:
        if not tokens:
            return 0
        removed = await self.token_repo.delete_tokens(db, tokens)
        logger.info("push_tokens_removed", count=removed)
        return removed

    # ── Direct send ─────────────────────────────────────────────────────────

    async def send_to_token(
        self,
        token: Optional[str],
        title: str,
        body: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Raises:
            BadRequestException: No token given.
            ExternalServiceException: FCM rejected the message.
        """
        if not token:
            raise BadRequestException("Token is required")
        result = await self.push.send(token, title, body, data)
        if not result.success:
            raise ExternalServiceException(
                "Failed to send notification",
                details={"error": result.error},
            )
        return result.message_id

    # ── Broadcasts ──────────────────────────────────────────────────────────

    async def send_daily_jobs_summary(
        self,
        db: AsyncSession,
    ) -> BroadcastResult:
        jobs = await self.job_repo.get_latest_active(db, limit=DAILY_SUMMARY_JOB_LIMIT)
        if not jobs:
            return BroadcastResult(message="No jobs available")

        tokens = await self.token_repo.all_tokens(db)
        if not tokens:
            return BroadcastResult(message="No notification tokens available")

        title, body = daily_summary_message([job.title for job in jobs])
        data = {"url": "/jobs", "jobCount": len(jobs), "tag": "daily-jobs-summary"}

        batch = await self.push.send_many(tokens, title, body, data)
        removed = await self._remove_invalid(db, batch.invalid_tokens)
        await db.commit()

        logger.info("daily_jobs_summary_sent", jobs=len(jobs), sent=batch.sent, failed=batch.failed)
        return BroadcastResult(
            message=f"Daily summary sent for {len(jobs)} jobs",
            sent=batch.sent,
            failed=batch.failed,
            removed_tokens=removed,
        )

    async def send_tip(
        self,
        db: AsyncSession,
        kind: str,
    ) -> BroadcastResult:
        if kind == "weekly":
            tip = random.choice(WEEKLY_TIPS)
        elif kind in TIPS:
            tip = TIPS[kind]
        else:
            raise NotFoundException(f"Unknown tip type: {kind}")

        tokens = await self.token_repo.all_tokens(db)
        if not tokens:
            return BroadcastResult(message="No notification tokens available")

        batch = await self.push.send_many(tokens, tip.title, tip.body, tip.data)
        removed = await self._remove_invalid(db, batch.invalid_tokens)
        await db.commit()

        logger.info("tip_sent", kind=kind, sent=batch.sent)
        return BroadcastResult(
            message=f"Tip sent: {tip.title}",
            sent=batch.sent,
            failed=batch.failed,
            removed_tokens=removed,
        )

    async def send_daily_match_digests(
        self,
        db: AsyncSession,
    ) -> BroadcastResult:
        """
        One push per user summarising today's unsent matches at or above
        the save threshold. Matches are marked notified only after a
        successful send.
        """
        today = utc_today()
        job_ids = await self.job_repo.get_ids_created_since(db, start_of_day(utcnow()))
        if not job_ids:
            return BroadcastResult(message="No new jobs today")

        users = await self.user_repo.get_notifiable_users(db)
        sent = failed = removed = 0
        for user in users:
            matches = await self.match_repo.get_unsent_for_jobs(
                db, user.id, job_ids, settings.match_save_threshold
            )
            if not matches:
                continue

            tokens = await self.token_repo.tokens_for_user(db, user.id)
            batch = await self.push.send_many(
                tokens,
                "🎯 New Job Matches",
                match_digest_body(len(matches)),
                {"url": "/jobs?tab=matches", "tag": "job-matches", "matchCount": len(matches)},
            )
            removed += await self._remove_invalid(db, batch.invalid_tokens)

            if batch.sent:
                sent += 1
                await self.match_repo.mark_notified(db, matches, utcnow(), today)
            else:
                failed += 1

        await db.commit()
        logger.info("match_digests_sent", users=sent, failed=failed)
        return BroadcastResult(
            message=f"Match digests sent to {sent} users",
            sent=sent,
            failed=failed,
            removed_tokens=removed,
        )

    # ── In-app application notifications ────────────────────────────────────

    async def list_application_notifications(
        self,
        db: AsyncSession,
        user: User,
        unread_only: bool = False,
    ) -> List[ApplicationNotification]:
        return await self.notification_repo.list_for_user(db, user.id, unread_only=unread_only)

    async def mark_read(
        self,
        db: AsyncSession,
        user: User,
        notification_id: UUID,
    ) -> ApplicationNotification:
        notification = await self.notification_repo.get_for_user(db, user.id, notification_id)
        if not notification:
            raise NotFoundException("Notification not found")
        notification.is_read = True
        await db.commit()
        return notification
