"""
Company schemas.
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from app.schemas.base import BaseSchema, IDSchema


class CompanyResponse(IDSchema):
    name: str
    slug: str
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    is_published: bool = False


class CompanyDetail(CompanyResponse):
    description: Optional[str] = None
    published_at: Optional[datetime] = None
    active_jobs: int = 0


class CompanyCreate(BaseSchema):
    name: str = Field(..., min_length=1, max_length=255)
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    description: Optional[str] = None
    is_published: bool = False


class CompanyUpdate(BaseSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    website: Optional[str] = None
    industry: Optional[str] = None
    location: Optional[str] = None
    logo_url: Optional[str] = None
    description: Optional[str] = None
    is_published: Optional[bool] = None
