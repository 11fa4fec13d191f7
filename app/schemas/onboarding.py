"""
Onboarding schemas: CV upload, CV parsing and the saved career profile.
"""
from datetime import datetime
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from pydantic import Field, field_validator

from app.schemas.base import BaseSchema


class CVPresignRequest(BaseSchema):
    """Sent by the client to request a presigned S3 upload URL."""

    filename: str = Field(..., min_length=1, max_length=255)
    file_size_bytes: int = Field(..., gt=0)

    @field_validator("filename")
    @classmethod
    def filename_must_be_pdf(cls, v: str) -> str:
        if not v.lower().endswith(".pdf"):
            raise ValueError("Only PDF files are accepted")
        return v


class CVPresignResponse(BaseSchema):
    s3_key: str
    upload_url: str
    upload_fields: Dict[str, Any]
    expires_in: int


class CVExtractRequest(BaseSchema):
    s3_key: str = Field(..., min_length=1)


class CVExtractResponse(BaseSchema):
    text: str
    pages: int
    characters: int


class ParseCVRequest(BaseSchema):
    text: Optional[str] = None


class OnboardingRequest(BaseSchema):
    """
    Everything the onboarding flow collects. Field names match the columns
    on ``onboarding_data``; list fields accept arrays or comma separated strings.
    """

    full_name: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    location: Optional[str] = Field(None, max_length=255)

    cv_name: Optional[str] = None
    cv_email: Optional[str] = None
    cv_phone: Optional[str] = None
    cv_location: Optional[str] = None
    cv_summary: Optional[str] = None
    cv_roles: List[Any] = []
    cv_skills: List[Any] = []
    cv_experience: Optional[str] = None
    cv_work_experience: List[Any] = []
    cv_education: List[Any] = []
    cv_projects: List[Any] = []
    cv_accomplishments: List[Any] = []
    cv_awards: List[Any] = []
    cv_certifications: List[Any] = []
    cv_languages: List[Any] = []
    cv_interests: List[Any] = []
    cv_publications: List[Any] = []
    cv_volunteer_work: List[Any] = []
    cv_additional_sections: List[Any] = []
    cv_ai_suggested_roles: List[Any] = []
    cv_linkedin: Optional[str] = None
    cv_github: Optional[str] = None
    cv_portfolio: Optional[str] = None

    target_roles: List[str] = []
    preferred_locations: List[str] = []
    salary_min: Optional[Union[int, str]] = None
    salary_max: Optional[Union[int, str]] = None
    experience_level: Optional[str] = None
    job_type: Optional[str] = None
    remote_preference: Optional[str] = None
    sector: Optional[str] = None

    cv_text: Optional[str] = None
    cv_file_name: Optional[str] = None
    cv_file_type: Optional[str] = None
    cv_file_size: Optional[int] = None

    @field_validator(
        "cv_roles", "cv_skills", "target_roles", "preferred_locations",
        mode="before",
    )
    @classmethod
    def split_csv(cls, v: Any) -> Any:
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        if v is None:
            return []
        return v


class OnboardingResponse(BaseSchema):
    id: UUID
    user_id: UUID
    cv_name: Optional[str] = None
    cv_email: Optional[str] = None
    cv_phone: Optional[str] = None
    cv_location: Optional[str] = None
    cv_summary: Optional[str] = None
    cv_roles: List[Any] = []
    cv_skills: List[Any] = []
    cv_work_experience: List[Any] = []
    cv_education: List[Any] = []
    cv_projects: List[Any] = []
    cv_certifications: List[Any] = []
    cv_languages: List[Any] = []
    cv_ai_suggested_roles: List[Any] = []
    cv_linkedin: Optional[str] = None
    cv_github: Optional[str] = None
    cv_portfolio: Optional[str] = None
    target_roles: List[str] = []
    preferred_locations: List[str] = []
    salary_min: Optional[int] = None
    salary_max: Optional[int] = None
    experience_level: Optional[str] = None
    job_type: Optional[str] = None
    remote_preference: Optional[str] = None
    sector: Optional[str] = None
    cv_file_name: Optional[str] = None
    completed_at: Optional[datetime] = None
