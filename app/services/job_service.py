"""
Job service - business logic for job listing, detail and related jobs.
"""
from datetime import timedelta
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import JobNotFoundException
from app.core.logging import get_logger
from app.models.job import Job
from app.repositories.job_repository import JobRepository
from app.schemas.base import PaginatedResponse
from app.schemas.job import CompanyBrief, JobDetail, JobListItem, LocationBrief
from app.utils.dates import utcnow
from app.utils.jobs import application_email, parse_company, parse_location
from app.utils.slugs import parse_job_slug

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100


def clamp_limit(limit: int) -> int:
    return max(1, min(limit, MAX_PAGE_SIZE))


def _as_uuid(value: Optional[str]) -> Optional[UUID]:
    if not value:
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


def _company_brief(job: Job) -> CompanyBrief:
    ref = parse_company(job.company)
    return CompanyBrief(name=ref.name, website=ref.website, industry=ref.industry)


def _location_brief(job: Job) -> LocationBrief:
    loc = parse_location(job.location)
    return LocationBrief(
        city=loc.city,
        state=loc.state,
        country=loc.country,
        remote=loc.remote,
        display=loc.display,
    )


def to_list_item(job: Job) -> JobListItem:
    return JobListItem(
        id=job.id,
        slug=job.slug,
        title=job.title,
        role=job.role,
        sector=job.sector,
        company=_company_brief(job),
        location=_location_brief(job),
        employment_type=job.employment_type,
        experience_level=job.experience_level,
        salary_range=job.salary_range,
        posted_date=job.posted_date,
        created_at=job.created_at,
    )


def to_detail(job: Job) -> JobDetail:
    item = to_list_item(job)
    return JobDetail(
        **item.model_dump(),
        description=job.description,
        related_roles=job.related_roles or [],
        skills_required=job.skills_required or [],
        responsibilities=job.responsibilities or [],
        qualifications=job.qualifications or [],
        benefits=job.benefits or [],
        application=job.application,
        source_url=job.source_url,
        deadline=job.deadline,
        status=job.status,
        can_auto_apply=application_email(job.application) is not None,
    )


class JobService:
    """Handles job search, detail retrieval and related listings."""

    def __init__(self):
        self.job_repo = JobRepository()

    async def search(
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
    ):
        """Raw ``(jobs, total)`` for callers that render their own format (feeds)."""
        return await self.job_repo.find_with_filters(
            db,
            search=search,
            location=location,
            remote=remote,
            source=source,
            sector=sector,
            page=max(page, 1),
            limit=clamp_limit(limit),
        )

    async def list_jobs(
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
    ) -> PaginatedResponse[JobListItem]:
        """Get paginated active jobs with filters."""
        page = max(page, 1)
        limit = clamp_limit(limit)
        jobs, total = await self.search(
            db,
            search=search,
            location=location,
            remote=remote,
            source=source,
            sector=sector,
            page=page,
            limit=limit,
        )

        return PaginatedResponse(
            items=[to_list_item(job) for job in jobs],
            total=total,
            page=page,
            limit=limit,
            pages=(total + limit - 1) // limit if total > 0 else 0,
        )

    async def get_by_slug_or_id(
        self,
        db: AsyncSession,
        value: str,
    ) -> Job:
        """
        Resolve ``/jobs/{value}``: a bare UUID, a slug ending in the id, or
        a stored slug.

        Raises:
            JobNotFoundException: Nothing matches.
        """
        job = None
        job_id = _as_uuid(value) or _as_uuid(parse_job_slug(value))
        if job_id:
            job = await self.job_repo.get_by_id(db, job_id)
        if not job:
            job = await self.job_repo.get_by_slug(db, value)
        if not job:
            raise JobNotFoundException()
        return job

    async def get_job_detail(
        self,
        db: AsyncSession,
        value: str,
    ) -> JobDetail:
        return to_detail(await self.get_by_slug_or_id(db, value))

    async def related_jobs(
        self,
        db: AsyncSession,
        job_id: UUID,
        limit: int = 6,
    ) -> List[JobListItem]:
        job = await self.job_repo.get_by_id(db, job_id)
        if not job:
            raise JobNotFoundException()
        related = await self.job_repo.get_related(db, job, limit=limit)
        return [to_list_item(j) for j in related]

    async def expire_old_jobs(
        self,
        db: AsyncSession,
    ) -> int:
        """Mark active jobs past their deadline or older than ``job_expiry_days`` as expired."""
        now = utcnow()
        expired = await self.job_repo.expire_older_than(
            db,
            created_before=now - timedelta(days=settings.job_expiry_days),
            now=now,
        )
        await db.commit()
        logger.info("jobs_expired", count=expired)
        return expired
