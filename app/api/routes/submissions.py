"""
Job submission routes - admins paste raw posting text, the AI splits it
into jobs.
"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user
from app.core.database import get_db
from app.core.rate_limit import RATE_AI, limiter
from app.models.user import User
from app.schemas.job import SubmissionRequest, SubmissionResponse
from app.services.submission_service import SubmissionService

router = APIRouter(prefix="/submissions", tags=["submissions"])

submission_service = SubmissionService()


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_AI)
async def submit_jobs(
    request: Request,
    payload: SubmissionRequest,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Parse and store job postings.

    Duplicates are skipped; each new job is queued for matching,
    search engine indexing and category page refresh.
    """
    return await submission_service.process_submission(db, payload.text)
