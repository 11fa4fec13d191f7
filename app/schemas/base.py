"""
Base schemas and common response models.

JSON keys stay snake_case; models are built straight from ORM rows.
"""
from datetime import datetime
from typing import Any, Generic, TypeVar, List, Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict


T = TypeVar("T")


class BaseSchema(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )


class TimestampSchema(BaseSchema):
    created_at: datetime
    updated_at: datetime


class IDSchema(BaseSchema):
    id: UUID


class PaginatedResponse(BaseSchema, Generic[T]):
    """One page of jobs or companies."""

    items: List[T]
    total: int
    page: int
    limit: int
    pages: int


class MessageResponse(BaseSchema):
    message: str


class ErrorResponse(BaseSchema):
    """Body of every error answer: ``{"error": CODE, "message": ..., "details": ...}``."""

    error: str
    message: str
    details: Optional[Any] = None
