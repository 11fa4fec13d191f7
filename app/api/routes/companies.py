"""
Company routes.

Thin controllers - CompanyService handles lookups, slugs and the live
active job count.
"""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import get_admin_user
from app.core.database import get_db
from app.models.user import User
from app.schemas.base import PaginatedResponse
from app.schemas.company import CompanyCreate, CompanyDetail, CompanyResponse, CompanyUpdate
from app.services.company_service import CompanyService

router = APIRouter(prefix="/companies", tags=["companies"])

company_service = CompanyService()


@router.get("", response_model=PaginatedResponse[CompanyResponse])
async def list_companies(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    """List published companies."""
    return await company_service.list_companies(db, search=search, page=page, limit=limit)


@router.get("/{slug}", response_model=CompanyDetail)
async def get_company(
    slug: str,
    db: AsyncSession = Depends(get_db),
):
    """Get a published company by slug with its active job count."""
    return await company_service.get_by_slug(db, slug)


@router.post("", response_model=CompanyResponse, status_code=status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreate,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new company page."""
    return await company_service.create(db, payload)


@router.patch("/{company_id}", response_model=CompanyResponse)
async def update_company(
    company_id: UUID,
    payload: CompanyUpdate,
    admin: User = Depends(get_admin_user),
    db: AsyncSession = Depends(get_db),
):
    """Update a company's details or publish it."""
    return await company_service.update(db, company_id, payload)
