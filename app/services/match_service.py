"""
Match service - persists match scores and queues premium auto-applies.

Scoring itself is in ``match_engine``.
"""
from datetime import datetime, timedelta
from typing import Dict, List
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import JobNotFoundException, OnboardingIncompleteException
from app.core.logging import get_logger
from app.models.user import User
from app.repositories.job_repository import JobRepository
from app.repositories.match_repository import MatchRepository
from app.repositories.onboarding_repository import OnboardingRepository
from app.repositories.subscription_repository import SubscriptionRepository
from app.services.match_engine import MatchResult, score_job
from app.utils.dates import as_utc, start_of_day, utcnow
from app.utils.jobs import application_email

logger = get_logger(__name__)


def _has_matchable_data(profile) -> bool:
    return bool(profile.target_roles) or bool(profile.cv_skills)


class MatchService:
    """Computes and caches job matches."""

    def __init__(self):
        self.job_repo = JobRepository()
        self.match_repo = MatchRepository()
        self.onboarding_repo = OnboardingRepository()
        self.subscription_repo = SubscriptionRepository()

    async def score_for_user(
        self,
        db: AsyncSession,
        user: User,
        job_id: UUID,
    ) -> MatchResult:
        """
        Score for the current user, served from ``job_matches`` when it is
        fresher than ``match_cache_days``.

        Raises:
            JobNotFoundException: Unknown job.
            OnboardingIncompleteException: User has no profile yet.
        """
        cached = await self.match_repo.get_for_user_job(db, user.id, job_id)
        cutoff = utcnow() - timedelta(days=settings.match_cache_days)
        if cached and as_utc(cached.computed_at) >= cutoff:
            return MatchResult(
                score=cached.score,
                breakdown=cached.breakdown or {},
                computed_at=as_utc(cached.computed_at),
                cached=True,
            )

        job = await self.job_repo.get_by_id(db, job_id)
        if not job:
            raise JobNotFoundException()

        profile = await self.onboarding_repo.get_by_user(db, user.id)
        if not profile:
            raise OnboardingIncompleteException("Please complete your profile to see match scores")

        result = score_job(job, profile)
        await self.match_repo.upsert(
            db,
            user.id,
            job.id,
            score=result.score,
            breakdown=result.breakdown,
            computed_at=result.computed_at,
        )
        await db.commit()
        return result

    async def match_new_job(
        self,
        db: AsyncSession,
        job_id: UUID,
    ) -> Dict[str, int]:
        """
        Score a freshly inserted job against every profile.

        Matches at or above ``match_save_threshold`` are stored. For users
        with an active subscription, an emailable job becomes an auto-apply
        candidate; the user's top N candidates (by plan) are queued.
        """
        job = await self.job_repo.get_by_id(db, job_id)
        if not job:
            raise JobNotFoundException()

        profiles = await self.onboarding_repo.get_matchable_profiles(db)
        profiles = [p for p in profiles if _has_matchable_data(p)]
        subscriptions = await self.subscription_repo.get_active_for_users(
            db, [p.user_id for p in profiles]
        )
        emailable = application_email(job.application) is not None
        now = utcnow()

        saved = 0
        premium_users: List[UUID] = []
        for profile in profiles:
            result = score_job(job, profile)
            if result.score < settings.match_save_threshold:
                continue

            match = await self.match_repo.upsert(
                db,
                profile.user_id,
                job.id,
                score=result.score,
                breakdown=result.breakdown,
                computed_at=result.computed_at,
            )
            saved += 1

            subscription = subscriptions.get(profile.user_id)
            if subscription and emailable:
                match.plan_type = subscription.plan_type
                premium_users.append(profile.user_id)
        await db.flush()

        queued = 0
        today_start = start_of_day(now)
        for user_id in premium_users:
            queued += await self._rank_candidates(
                db, user_id, subscriptions[user_id].auto_apply_top_n, today_start, now
            )

        cleaned = await self.match_repo.delete_computed_before(
            db, now - timedelta(hours=settings.match_retention_hours)
        )
        await db.commit()

        stats = {
            "profiles_scored": len(profiles),
            "matches_saved": saved,
            "premium_users": len(premium_users),
            "auto_apply_queued": queued,
            "matches_cleaned": cleaned,
        }
        logger.info("job_matched", job_id=str(job_id), **stats)
        return stats

    async def _rank_candidates(
        self,
        db: AsyncSession,
        user_id: UUID,
        top_n: int,
        since: datetime,
        now: datetime,
    ) -> int:
        """
        Re-rank a premium user's pending candidates from today; the best
        ``top_n`` are queued, the rest drop out of the queue.
        """
        pending = await self.match_repo.get_pending_candidates(db, user_id, since)
        ranked = sorted(pending, key=lambda m: m.score, reverse=True)
        for rank, match in enumerate(ranked, start=1):
            if rank <= top_n:
                match.is_auto_apply_eligible = True
                match.auto_apply_rank = rank
                match.queued_for_auto_apply_at = match.queued_for_auto_apply_at or now
            else:
                match.is_auto_apply_eligible = False
                match.auto_apply_rank = None
                match.queued_for_auto_apply_at = None
        return min(len(ranked), top_n)
