"""
Document service - tailored CV (PDF) and cover letter (HTML email body)
for an auto-apply.

The AI layer produces structured content; this module renders it to HTML
(every user-supplied value escaped) and sends the CV HTML to the
configured HTML-to-PDF provider.
"""
import base64
from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from typing import Any, Dict, List, Optional

import httpx

from app.core import ai
from app.core.config import settings
from app.core.logging import get_logger
from app.models.job import Job
from app.models.onboarding import OnboardingData
from app.utils.dates import utcnow
from app.utils.jobs import parse_company, parse_location

logger = get_logger(__name__)

DEFAULT_TEMPLATE_ID = "template-1"

_TEMPLATE_ACCENTS = {
    "template-1": "#5b21b6",
    "template-2": "#7f1d1d",
    "template-3": "#1e3a8a",
    "template-4": "#0f766e",
}


class DocumentGenerationError(RuntimeError):
    """Raised when the CV or cover letter could not be produced."""


@dataclass
class GeneratedDocuments:
    cv_pdf: bytes
    cover_letter_html: str
    cover_letter_subject: str
    generated_at: datetime = field(default_factory=utcnow)

    @property
    def cv_pdf_base64(self) -> str:
        return base64.b64encode(self.cv_pdf).decode("ascii")


# ── Input shaping ────────────────────────────────────────────────────────────

def profile_payload(profile: OnboardingData) -> Dict[str, Any]:
    return {
        "name": profile.cv_name,
        "email": profile.cv_email,
        "phone": profile.cv_phone,
        "location": profile.cv_location,
        "summary": profile.cv_summary,
        "roles": profile.cv_roles or [],
        "skills": profile.cv_skills or [],
        "workExperience": profile.cv_work_experience or [],
        "education": profile.cv_education or [],
        "projects": profile.cv_projects or [],
        "accomplishments": profile.cv_accomplishments or [],
        "awards": profile.cv_awards or [],
        "certifications": profile.cv_certifications or [],
        "languages": profile.cv_languages or [],
        "interests": profile.cv_interests or [],
        "linkedin": profile.cv_linkedin,
        "github": profile.cv_github,
        "portfolio": profile.cv_portfolio,
    }


def job_payload(job: Job) -> Dict[str, Any]:
    company = parse_company(job.company)
    return {
        "title": job.title,
        "company": company.name,
        "industry": company.industry,
        "location": parse_location(job.location).display,
        "employment_type": job.employment_type,
        "experience_level": job.experience_level,
        "description": job.description,
        "skills_required": job.skills_required or [],
        "responsibilities": job.responsibilities or [],
        "qualifications": job.qualifications or [],
    }


# ── HTML rendering ───────────────────────────────────────────────────────────

def _e(value: Any) -> str:
    return escape(str(value)) if value not in (None, "") else ""


def _section(title: str, body: str) -> str:
    if not body:
        return ""
    return f'<section><h2>{escape(title)}</h2>{body}</section>'


def _bullets(items: List[Any]) -> str:
    items = [i for i in items if i]
    if not items:
        return ""
    return "<ul>" + "".join(f"<li>{_e(i)}</li>" for i in items) + "</ul>"


def render_cv_html(cv: Dict[str, Any], template_id: str = DEFAULT_TEMPLATE_ID) -> str:
    accent = _TEMPLATE_ACCENTS.get(template_id, _TEMPLATE_ACCENTS[DEFAULT_TEMPLATE_ID])
    details = cv.get("personalDetails") or {}
    contact = " | ".join(
        _e(details.get(k))
        for k in ("email", "phone", "location", "linkedin", "github", "portfolio")
        if details.get(k)
    )

    experience = ""
    for item in cv.get("experience") or []:
        if not isinstance(item, dict):
            continue
        experience += (
            f'<div class="entry"><div class="entry-head"><strong>{_e(item.get("role"))}</strong>'
            f' - {_e(item.get("company"))}<span class="years">{_e(item.get("years"))}</span></div>'
            f'{_bullets(item.get("bullets") or [])}</div>'
        )

    education = ""
    for item in cv.get("education") or []:
        if not isinstance(item, dict):
            continue
        education += (
            f'<div class="entry"><strong>{_e(item.get("degree"))}</strong>'
            f' - {_e(item.get("institution"))}<span class="years">{_e(item.get("years"))}</span></div>'
        )

    projects = ""
    for item in cv.get("projects") or []:
        if isinstance(item, dict):
            projects += f'<p><strong>{_e(item.get("title"))}</strong>: {_e(item.get("description"))}</p>'

    certifications = [
        " - ".join(str(c.get(k)) for k in ("name", "issuer", "year") if c.get(k))
        for c in cv.get("certifications") or []
        if isinstance(c, dict)
    ]
    skills = ", ".join(_e(s) for s in cv.get("skills") or [] if s)

    body = (
        f'<header><h1>{_e(details.get("name"))}</h1>'
        f'<div class="title">{_e(details.get("title"))}</div>'
        f'<div class="contact">{contact}</div></header>'
        + _section("Profile", f'<p>{_e(cv.get("summary"))}</p>' if cv.get("summary") else "")
        + _section("Experience", experience)
        + _section("Education", education)
        + _section("Skills", f"<p>{skills}</p>" if skills else "")
        + _section("Projects", projects)
        + _section("Certifications", _bullets(certifications))
        + _section("Accomplishments", _bullets(cv.get("accomplishments") or []))
        + _section("Languages", _bullets(cv.get("languages") or []))
    )

    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<style>
  @page {{ size: A4; margin: 0; }}
  body {{ font-family: Helvetica, Arial, sans-serif; color: #1f2937; margin: 0; padding: 36px 44px; font-size: 11pt; }}
  header {{ border-bottom: 3px solid {accent}; padding-bottom: 10px; margin-bottom: 14px; }}
  h1 {{ margin: 0; color: {accent}; font-size: 24pt; }}
  h2 {{ color: {accent}; font-size: 12pt; text-transform: uppercase; margin: 16px 0 6px; }}
  .title {{ font-size: 13pt; margin-top: 4px; }}
  .contact {{ font-size: 9.5pt; color: #4b5563; margin-top: 6px; }}
  .entry {{ margin-bottom: 8px; }}
  .years {{ float: right; color: #6b7280; font-size: 9.5pt; }}
  ul {{ margin: 4px 0 0 18px; padding: 0; }}
</style>
</head>
<body>{body}</body>
</html>"""


def render_cover_letter_html(letter: Dict[str, Any], applicant_name: str) -> str:
    paragraphs = [letter.get(k) for k in ("opening", "body1", "body2", "body3") if letter.get(k)]
    html = "".join(f"<p>{_e(p)}</p>" for p in paragraphs)
    html += _bullets(letter.get("highlights") or [])
    if letter.get("closing"):
        html += f"<p>{_e(letter['closing'])}</p>"
    signoff = letter.get("signoff") or "Kind regards"
    html += f"<p>{_e(signoff)},<br>{_e(applicant_name)}</p>"
    return html


# ── PDF conversion ───────────────────────────────────────────────────────────

async def convert_html_to_pdf(html: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """
    POST the HTML to the configured provider and return PDF bytes.

    Raises:
        RuntimeError: No provider key configured, or the provider failed.
    """
    if not settings.pdf_service_api_key:
        raise RuntimeError(
            "PDF service is not configured. Set PDF_SERVICE_API_KEY "
            "(and PDF_SERVICE_URL for a self-hosted renderer)."
        )

    body = {"source": html, "format": "A4", "margin": "0mm", "use_print": False}
    auth = ("api", settings.pdf_service_api_key)

    try:
        if client is not None:
            response = await client.post(settings.pdf_service_url, json=body, auth=auth)
        else:
            async with httpx.AsyncClient(timeout=settings.pdf_service_timeout_seconds) as http:
                response = await http.post(settings.pdf_service_url, json=body, auth=auth)
    except httpx.HTTPError as exc:
        logger.error("pdf_service_transport_error", error=str(exc))
        raise RuntimeError("PDF conversion failed") from exc

    if response.status_code != 200:
        logger.error("pdf_service_error", status_code=response.status_code, body=response.text[:200])
        raise RuntimeError(f"PDF conversion failed with status {response.status_code}")
    return response.content


# ── Orchestration ────────────────────────────────────────────────────────────

class DocumentService:
    """Generates the application documents for one (profile, job) pair."""

    def __init__(self, pdf_client: Optional[httpx.AsyncClient] = None):
        self.pdf_client = pdf_client

    async def generate(
        self,
        profile: OnboardingData,
        job: Job,
        template_id: str = DEFAULT_TEMPLATE_ID,
    ) -> GeneratedDocuments:
        """
        Raises:
            DocumentGenerationError: Any step failed. The message says which.
        """
        profile_data = profile_payload(profile)
        job_data = job_payload(job)

        try:
            cv_data = await ai.generate_cv_data(profile_data, job_data)
        except Exception as exc:
            raise DocumentGenerationError(f"Failed to generate CV: {exc}") from exc

        try:
            letter = await ai.generate_cover_letter(profile_data, job_data, cv_data)
        except Exception as exc:
            raise DocumentGenerationError(f"Failed to generate cover letter: {exc}") from exc

        try:
            pdf = await convert_html_to_pdf(render_cv_html(cv_data, template_id), self.pdf_client)
        except RuntimeError as exc:
            raise DocumentGenerationError(str(exc)) from exc

        applicant = (cv_data.get("personalDetails") or {}).get("name") or profile.cv_name or ""
        documents = GeneratedDocuments(
            cv_pdf=pdf,
            cover_letter_html=render_cover_letter_html(letter, applicant),
            cover_letter_subject=letter.get("subject") or f"Application for {job.title or 'Position'}",
        )

        logger.info(
            "documents_generated",
            job_id=str(job.id),
            pdf_bytes=len(pdf),
            template_id=template_id,
        )
        return documents
