"""
Submission service - turns pasted job-posting text into job rows.

Pipeline: text -> AI parse -> dedupe -> insert with slug -> enqueue
(match, category page, IndexNow).
"""
import hashlib
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core import ai
from app.core.exceptions import BadRequestException, ExternalServiceException
from app.core.logging import get_logger
from app.models.job import JOB_STATUS_ACTIVE, Job
from app.repositories.job_repository import JobRepository
from app.schemas.job import SubmissionResponse
from app.utils.dates import as_utc
from app.utils.jobs import get_company_name, parse_location
from app.utils.slugs import unique_job_slug

logger = get_logger(__name__)

_JOB_FIELDS = (
    "title",
    "role",
    "related_roles",
    "ai_enhanced_roles",
    "sector",
    "ai_enhanced_sectors",
    "company",
    "location",
    "employment_type",
    "experience_level",
    "skills_required",
    "ai_enhanced_skills",
    "description",
    "responsibilities",
    "qualifications",
    "benefits",
    "salary_range",
    "application",
    "source",
    "source_url",
)


def build_duplicate_hash(title: Any, company: Any, source_url: Any) -> str:
    """SHA-256 of ``title|company|source_url``, lower-cased."""
    key = "|".join(
        [
            str(title or "").strip(),
            get_company_name(company) if company else "",
            str(source_url or "").strip(),
        ]
    ).lower()
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    if not value or not isinstance(value, str):
        return None
    try:
        return as_utc(datetime.fromisoformat(value.strip().replace("Z", "+00:00")))
    except ValueError:
        return None


class SubmissionService:
    def __init__(self):
        self.job_repo = JobRepository()

    async def process_submission(
        self,
        db: AsyncSession,
        text: str,
    ) -> SubmissionResponse:
        """
        Parse and insert the jobs contained in ``text``.

        Raises:
            BadRequestException: Empty text or no jobs found in it.
            ExternalServiceException: The AI call failed.
        """
        if not text or not text.strip():
            raise BadRequestException("Job text is required")

        try:
            parsed = await ai.parse_job_posting(text)
        except RuntimeError as exc:
            raise ExternalServiceException(str(exc), status_code=500) from exc
        if not parsed:
            raise BadRequestException("No jobs found in the submitted text", code="NO_JOBS_FOUND")

        created: List[Job] = []
        duplicates = 0
        for data in parsed:
            job = await self._insert(db, data)
            if job is None:
                duplicates += 1
            else:
                created.append(job)
        await db.commit()

        for job in created:
            self._enqueue_followups(job)

        logger.info("submission_processed", created=len(created), duplicates=duplicates)
        return SubmissionResponse(
            created=len(created),
            duplicates=duplicates,
            job_ids=[job.id for job in created],
        )

    async def _insert(self, db: AsyncSession, data: Dict[str, Any]) -> Optional[Job]:
        duplicate_hash = build_duplicate_hash(
            data.get("title"), data.get("company"), data.get("source_url")
        )
        if await self.job_repo.get_by_duplicate_hash(db, duplicate_hash):
            logger.info("submission_duplicate_skipped", title=data.get("title"))
            return None

        fields = {name: data.get(name) for name in _JOB_FIELDS if data.get(name) is not None}
        slug = await unique_job_slug(db, data.get("title"), data.get("company"))
        return await self.job_repo.create(
            db,
            **fields,
            posted_date=parse_iso_datetime(data.get("posted_date")),
            deadline=parse_iso_datetime(data.get("deadline")),
            status=JOB_STATUS_ACTIVE,
            slug=slug,
            duplicate_hash=duplicate_hash,
        )

    def _enqueue_followups(self, job: Job) -> None:
        # Deferred import avoids circular imports with the worker package
        from app.workers.tasks import create_category_page, match_new_job, submit_to_indexnow

        job_id = str(job.id)
        match_new_job.delay(job_id)
        if job.slug:
            submit_to_indexnow.delay(job.slug)
        if job.sector:
            loc = parse_location(job.location)
            create_category_page.delay(job.sector, loc.state)
