"""
Job routes.

Feed routes are declared before ``/{slug_or_id}`` so "feed" and
"feed.json" are never read as job slugs.
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_current_user
from app.core.database import get_db
from app.core.logging import get_logger
from app.core.rate_limit import RATE_AUTO_APPLY, RATE_FEED, limiter
from app.models.user import User
from app.schemas.base import PaginatedResponse
from app.schemas.job import ApplyResponse, JobDetail, JobListItem, MatchResponse
from app.services.auto_apply_service import AutoApplyService
from app.services.feed_service import (
    JSON_FEED_DEFAULT_LIMIT,
    RSS_DEFAULT_LIMIT,
    FeedFilters,
    FeedService,
    render_rss_error,
)
from app.services.job_service import MAX_PAGE_SIZE, JobService
from app.services.match_service import MatchService

logger = get_logger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])

job_service = JobService()
feed_service = FeedService()
match_service = MatchService()
auto_apply_service = AutoApplyService()

RSS_MEDIA_TYPE = "application/rss+xml; charset=utf-8"
FEED_CACHE_CONTROL = "public, max-age=300"


@router.get("", response_model=PaginatedResponse[JobListItem])
async def list_jobs(
    search: Optional[str] = Query(None, description="Title, company or description keyword"),
    location: Optional[str] = Query(None, description="City, state or country"),
    remote: Optional[bool] = Query(None),
    source: Optional[str] = Query(None),
    sector: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    """List active jobs, newest first."""
    return await job_service.list_jobs(
        db,
        search=search,
        location=location,
        remote=remote,
        source=source,
        sector=sector,
        page=page,
        limit=limit,
    )


@router.get("/feed")
@limiter.limit(RATE_FEED)
async def rss_feed(
    request: Request,
    search: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    remote: Optional[bool] = Query(None),
    source: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(RSS_DEFAULT_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    """RSS 2.0 feed of active jobs."""
    filters = FeedFilters(search=search, location=location, remote=remote, source=source)
    try:
        body = await feed_service.rss(db, filters, page=page, limit=limit)
    except Exception as exc:
        logger.error("rss_feed_failed", error=str(exc), exc_info=True)
        return Response(content=render_rss_error(), status_code=500, media_type=RSS_MEDIA_TYPE)

    return Response(
        content=body,
        media_type=RSS_MEDIA_TYPE,
        headers={"Cache-Control": FEED_CACHE_CONTROL},
    )


@router.get("/feed.json")
@limiter.limit(RATE_FEED)
async def json_feed(
    request: Request,
    response: Response,
    search: Optional[str] = Query(None),
    location: Optional[str] = Query(None),
    remote: Optional[bool] = Query(None),
    source: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(JSON_FEED_DEFAULT_LIMIT, ge=1, le=MAX_PAGE_SIZE),
    db: AsyncSession = Depends(get_db),
):
    """JSON Feed 1.1 of active jobs, paginated through ``next_url``."""
    filters = FeedFilters(search=search, location=location, remote=remote, source=source)
    feed = await feed_service.json_feed(db, filters, page=page, limit=limit)
    response.headers["Cache-Control"] = FEED_CACHE_CONTROL
    return feed


@router.get("/{slug_or_id}", response_model=JobDetail)
async def get_job(
    slug_or_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a job by UUID or by its SEO slug."""
    return await job_service.get_job_detail(db, slug_or_id)


@router.get("/{job_id}/related", response_model=List[JobListItem])
async def get_related_jobs(
    job_id: UUID,
    limit: int = Query(6, ge=1, le=20),
    db: AsyncSession = Depends(get_db),
):
    """Other active jobs in the same sector or role."""
    return await job_service.related_jobs(db, job_id, limit=limit)


@router.get("/{job_id}/match", response_model=MatchResponse)
async def get_match_score(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """How well the current user's profile fits this job."""
    result = await match_service.score_for_user(db, current_user, job_id)
    return MatchResponse(
        job_id=job_id,
        score=result.score,
        breakdown=result.breakdown,
        computed_at=result.computed_at,
        cached=result.cached,
    )


@router.post("/{job_id}/apply", response_model=ApplyResponse)
@limiter.limit(RATE_AUTO_APPLY)
async def apply_to_job(
    request: Request,
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Generate a tailored CV and cover letter and email them to the employer.

    Charges credits only when the email is sent.
    """
    return await auto_apply_service.apply(db, current_user, job_id)
