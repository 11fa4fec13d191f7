"""
Career tool schemas (AI proxies).
"""
from typing import Any, Dict, List, Optional

from pydantic import Field

from app.schemas.base import BaseSchema


class PromptRequest(BaseSchema):
    prompt: Optional[str] = None
    temperature: Optional[float] = Field(None, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(None, gt=0, le=16000)


class PromptResponse(BaseSchema):
    success: bool = True
    data: str


class CareerCoachResponse(BaseSchema):
    success: bool = True
    data: Dict[str, Any]


class ScamDetectorRequest(BaseSchema):
    text: Optional[str] = None
    email_content: Optional[str] = None
    job_posting: Optional[str] = None
    company_name: Optional[str] = None


class ScamDetectorResponse(BaseSchema):
    trustScore: int
    riskLevel: str
    redFlags: List[Any] = []
    warnings: List[Any] = []
    safeIndicators: List[Any] = []
    analysis: str = ""
