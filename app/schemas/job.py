"""
Job schemas.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from app.schemas.base import BaseSchema, IDSchema


class CompanyBrief(BaseSchema):
    """Company as resolved from a job row."""

    name: str
    website: Optional[str] = None
    industry: Optional[str] = None


class LocationBrief(BaseSchema):
    city: Optional[str] = None
    state: Optional[str] = None
    country: Optional[str] = None
    remote: bool = False
    display: str = ""


class JobListItem(IDSchema):
    """Job list item (minimal info for lists)."""

    slug: Optional[str] = None
    title: str
    role: Optional[str] = None
    sector: Optional[str] = None
    company: CompanyBrief
    location: LocationBrief
    employment_type: Optional[str] = None
    experience_level: Optional[str] = None
    salary_range: Optional[Dict[str, Any]] = None
    posted_date: Optional[datetime] = None
    created_at: datetime


class JobDetail(JobListItem):
    """Full job detail."""

    description: Optional[str] = None
    related_roles: List[str] = []
    skills_required: List[str] = []
    responsibilities: List[Any] = []
    qualifications: List[Any] = []
    benefits: List[Any] = []
    application: Optional[Dict[str, Any]] = None
    source_url: Optional[str] = None
    deadline: Optional[datetime] = None
    status: str
    can_auto_apply: bool = False


class MatchResponse(BaseSchema):
    job_id: UUID
    score: int
    breakdown: Dict[str, Any]
    computed_at: datetime
    cached: bool = False


class ApplyResponse(BaseSchema):
    success: bool = True
    message: str
    application_id: UUID
    message_id: Optional[str] = None
    sent_at: Optional[datetime] = None


class SubmissionRequest(BaseSchema):
    text: str


class SubmissionResponse(BaseSchema):
    created: int
    duplicates: int
    job_ids: List[UUID] = []
