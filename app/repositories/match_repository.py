"""
Match repository - persisted match scores and the auto-apply queue.
"""
from datetime import date, datetime
from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job import Job
from app.models.job_match import JobMatch
from app.repositories.base import BaseRepository


class MatchRepository(BaseRepository[JobMatch]):
    def __init__(self):
        super().__init__(JobMatch)

    async def get_for_user_job(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_id: UUID,
    ) -> Optional[JobMatch]:
        result = await db.execute(
            select(JobMatch).where(JobMatch.user_id == user_id, JobMatch.job_id == job_id)
        )
        return result.scalar_one_or_none()

    async def upsert(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_id: UUID,
        **fields,
    ) -> JobMatch:
        existing = await self.get_for_user_job(db, user_id, job_id)
        if existing:
            return await self.update(db, existing, **fields)
        return await self.create(db, user_id=user_id, job_id=job_id, **fields)

    async def delete_computed_before(
        self,
        db: AsyncSession,
        cutoff: datetime,
    ) -> int:
        result = await db.execute(delete(JobMatch).where(JobMatch.computed_at < cutoff))
        return result.rowcount or 0

    async def get_auto_apply_queue(
        self,
        db: AsyncSession,
        *,
        plan_type: Optional[str] = None,
        limit: int = 500,
    ) -> List[JobMatch]:
        """Queued eligible matches grouped by user, in rank order."""
        query = select(JobMatch).where(
            JobMatch.is_auto_apply_eligible == True,
            JobMatch.queued_for_auto_apply_at.isnot(None),
        )
        if plan_type:
            query = query.where(JobMatch.plan_type == plan_type)
        query = query.order_by(JobMatch.user_id, JobMatch.auto_apply_rank).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_unsent_for_jobs(
        self,
        db: AsyncSession,
        user_id: UUID,
        job_ids: Sequence[UUID],
        min_score: int,
    ) -> List[JobMatch]:
        if not job_ids:
            return []
        result = await db.execute(
            select(JobMatch)
            .where(
                JobMatch.user_id == user_id,
                JobMatch.job_id.in_(list(job_ids)),
                JobMatch.score >= min_score,
                JobMatch.notification_sent == False,
            )
            .order_by(JobMatch.score.desc())
        )
        return list(result.scalars().all())

    async def top_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        *,
        min_score: int,
        limit: int = 20,
    ) -> List[tuple]:
        """(match, job) pairs for the user's best active matches."""
        result = await db.execute(
            select(JobMatch, Job)
            .join(Job, Job.id == JobMatch.job_id)
            .where(JobMatch.user_id == user_id, JobMatch.score >= min_score, Job.status == "active")
            .order_by(JobMatch.score.desc())
            .limit(limit)
        )
        return [tuple(row) for row in result.all()]

    async def mark_notified(
        self,
        db: AsyncSession,
        matches: Sequence[JobMatch],
        when: datetime,
        notification_date: date,
    ) -> None:
        for match in matches:
            match.notification_sent = True
            match.notification_sent_at = when
            match.notification_date = notification_date
        await db.flush()

    async def get_pending_candidates(
        self,
        db: AsyncSession,
        user_id: UUID,
        since: datetime,
    ) -> List[JobMatch]:
        """Premium candidates computed since ``since`` that the queue has not consumed."""
        result = await db.execute(
            select(JobMatch).where(
                JobMatch.user_id == user_id,
                JobMatch.plan_type.isnot(None),
                JobMatch.computed_at >= since,
                or_(
                    JobMatch.is_auto_apply_eligible == False,
                    JobMatch.queued_for_auto_apply_at.isnot(None),
                ),
            )
        )
        return list(result.scalars().all())
