"""
Job repository - data access for Job entity.
"""
from datetime import datetime, timedelta
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import String, and_, cast, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.job import Job, JOB_STATUS_ACTIVE, JOB_STATUS_EXPIRED
from app.repositories.base import BaseRepository


def _json_text(column):
    return func.lower(cast(column, String))


class JobRepository(BaseRepository[Job]):
    def __init__(self):
        super().__init__(Job)

    def _filters(
        self,
        *,
        search: Optional[str] = None,
        location: Optional[str] = None,
        remote: Optional[bool] = None,
        source: Optional[str] = None,
        sector: Optional[str] = None,
    ) -> list:
        filters = [Job.status == JOB_STATUS_ACTIVE]

        if search:
            term = f"%{search.lower()}%"
            filters.append(
                or_(
                    func.lower(Job.title).like(term),
                    func.lower(Job.description).like(term),
                    _json_text(Job.company).like(term),
                )
            )
        if location:
            filters.append(_json_text(Job.location).like(f"%{location.lower()}%"))
        if remote:
            filters.append(
                or_(
                    _json_text(Job.location).like('%"remote": true%'),
                    _json_text(Job.location).like('%"remote":true%'),
                    _json_text(Job.location).like('"remote"'),
                )
            )
        if source:
            filters.append(_json_text(Job.source).like(f"%{source.lower()}%"))
        if sector:
            filters.append(Job.sector == sector)
        return filters

    async def find_with_filters(
        self,
        db: AsyncSession,
        *,
        search: Optional[str] = None,
        location: Optional[str] = None,
        remote: Optional[bool] = None,
        source: Optional[str] = None,
        sector: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Job], int]:
        """
        Active jobs matching the filters, newest first.

        Returns:
            Tuple of (jobs list, total count)
        """
        filters = self._filters(
            search=search, location=location, remote=remote, source=source, sector=sector
        )
        query = select(Job).where(and_(*filters))

        count_query = select(func.count()).select_from(query.subquery())
        total = (await db.execute(count_query)).scalar() or 0

        query = query.order_by(Job.created_at.desc()).offset((page - 1) * limit).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all()), total

    async def get_by_duplicate_hash(
        self,
        db: AsyncSession,
        duplicate_hash: str,
    ) -> Optional[Job]:
        result = await db.execute(select(Job).where(Job.duplicate_hash == duplicate_hash))
        return result.scalar_one_or_none()

    async def get_latest_active(
        self,
        db: AsyncSession,
        limit: int = 50,
    ) -> List[Job]:
        result = await db.execute(
            select(Job)
            .where(Job.status == JOB_STATUS_ACTIVE)
            .order_by(Job.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_related(
        self,
        db: AsyncSession,
        job: Job,
        limit: int = 6,
    ) -> List[Job]:
        """Other active jobs in the same sector."""
        if not job.sector:
            return []
        result = await db.execute(
            select(Job)
            .where(
                Job.status == JOB_STATUS_ACTIVE,
                Job.sector == job.sector,
                Job.id != job.id,
            )
            .order_by(Job.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_created_since(
        self,
        db: AsyncSession,
        since: datetime,
    ) -> List[Job]:
        result = await db.execute(
            select(Job).where(
                Job.status == JOB_STATUS_ACTIVE,
                Job.created_at >= since,
            )
        )
        return list(result.scalars().all())

    async def get_ids_created_since(
        self,
        db: AsyncSession,
        since: datetime,
    ) -> List[UUID]:
        result = await db.execute(
            select(Job.id).where(Job.status == JOB_STATUS_ACTIVE, Job.created_at >= since)
        )
        return list(result.scalars().all())

    async def count_active(
        self,
        db: AsyncSession,
    ) -> int:
        result = await db.execute(
            select(func.count()).select_from(Job).where(Job.status == JOB_STATUS_ACTIVE)
        )
        return result.scalar() or 0

    async def get_active_page(
        self,
        db: AsyncSession,
        *,
        offset: int,
        limit: int,
        since: Optional[datetime] = None,
    ) -> List[Job]:
        """Active jobs, newest first, for sitemaps."""
        query = select(Job).where(Job.status == JOB_STATUS_ACTIVE)
        if since is not None:
            query = query.where(Job.created_at >= since)
        query = query.order_by(Job.created_at.desc()).offset(offset).limit(limit)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def get_active_locations(
        self,
        db: AsyncSession,
    ) -> list:
        result = await db.execute(
            select(Job.location).where(Job.status == JOB_STATUS_ACTIVE, Job.location.isnot(None))
        )
        return list(result.scalars().all())

    async def count_matching(
        self,
        db: AsyncSession,
        *,
        category: str,
        location: Optional[str] = None,
    ) -> int:
        """Active jobs whose sector, role or title matches a category."""
        term = f"%{category.lower()}%"
        filters = [
            Job.status == JOB_STATUS_ACTIVE,
            or_(
                func.lower(Job.sector) == category.lower(),
                func.lower(Job.role).like(term),
                func.lower(Job.title).like(term),
            ),
        ]
        if location:
            filters.append(_json_text(Job.location).like(f"%{location.lower()}%"))
        result = await db.execute(select(func.count()).select_from(Job).where(*filters))
        return result.scalar() or 0

    async def count_for_company(
        self,
        db: AsyncSession,
        company_name: str,
    ) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Job)
            .where(
                Job.status == JOB_STATUS_ACTIVE,
                _json_text(Job.company).like(f"%{company_name.lower()}%"),
            )
        )
        return result.scalar() or 0

    async def expire_older_than(
        self,
        db: AsyncSession,
        *,
        created_before: datetime,
        now: datetime,
    ) -> int:
        """Mark active jobs past their deadline or older than the cutoff as expired."""
        result = await db.execute(
            update(Job)
            .where(
                Job.status == JOB_STATUS_ACTIVE,
                or_(
                    Job.created_at < created_before,
                    and_(Job.deadline.isnot(None), Job.deadline < now),
                ),
            )
            .values(status=JOB_STATUS_EXPIRED)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def count_created_since(
        self,
        db: AsyncSession,
        days: int,
        now: datetime,
    ) -> int:
        result = await db.execute(
            select(func.count())
            .select_from(Job)
            .where(Job.created_at >= now - timedelta(days=days))
        )
        return result.scalar() or 0
