"""
OpenAI helpers for every generative feature of JobMeter.

All OpenAI calls go through this module so we can:
  - Centralise API key management and model selection
  - Enforce input truncation (cost control)
  - Validate LLM JSON responses (fallback defaults, or a hard failure for
    documents that are emailed to employers)
  - Wrap errors into structured, sanitized responses

Functions:
  parse_cv_text         - raw CV text -> structured onboarding fields
  generate_cv_data      - profile + job -> tailored CV content
  generate_cover_letter - profile + job -> email-format cover letter
  career_coach          - profile summary -> paths, gaps, insights
  run_prompt            - free-form prompt -> raw text (interview prep, ATS review)
  detect_scam           - job posting / email -> trust assessment
  parse_job_posting     - pasted posting text -> structured job records
"""
import json
import math
from typing import Any, Dict, List, Optional

import openai
from openai import AsyncOpenAI

from app.core.config import settings
from app.core.logging import get_logger
from app.utils.sectors import SECTORS

logger = get_logger(__name__)

_MAX_CV_CHARS = 30_000
_MAX_JOB_CHARS = 15_000
_MAX_PROMPT_CHARS = 40_000

CV_LIST_FIELDS = (
    "skills",
    "workExperience",
    "education",
    "suggestedRoles",
    "projects",
    "accomplishments",
    "awards",
    "certifications",
    "languages",
    "interests",
    "publications",
    "volunteerWork",
    "additionalSections",
)
CV_STRING_FIELDS = (
    "fullName",
    "email",
    "phone",
    "location",
    "summary",
    "linkedin",
    "github",
    "portfolio",
)

CAREER_COACH_KEYS = ("personalizedPaths", "skillGaps", "insights", "marketInsights")


EMPLOYMENT_TYPES = ("Full-time", "Part-time", "Contract", "Freelance", "Internship")
EXPERIENCE_LEVELS = ("Entry-level", "Junior", "Mid-Level", "Senior", "Lead", "Executive")


def _client() -> AsyncOpenAI:
    """Lazily create an OpenAI async client (lightweight, re-created per call)."""
    if not settings.openai_api_key:
        raise RuntimeError(
            "OPENAI_API_KEY is not configured. Set it as an environment variable."
        )
    return AsyncOpenAI(api_key=settings.openai_api_key)


def _truncate(text: str, max_chars: int) -> str:
    """Truncate text to max_chars, appending indicator if truncated."""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "\n... [truncated]"


def _safe_parse_json(raw: str, fallback: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Parse the model's JSON reply.

    Malformed or non-object output returns ``fallback``. With no fallback
    it raises RuntimeError instead, for replies that are sent on verbatim.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as exc:
        logger.warning("llm_json_parse_error", error=str(exc), raw_head=(raw or "")[:200])
        if fallback is None:
            raise RuntimeError("Failed to parse AI response as JSON") from exc
        return fallback
    if isinstance(parsed, dict):
        return parsed
    logger.warning("llm_json_not_dict", raw_type=type(parsed).__name__)
    if fallback is None:
        raise RuntimeError("AI response was not a JSON object")
    return fallback


async def _chat_json(
    endpoint: str,
    system: str,
    user: str,
    *,
    temperature: float,
    max_tokens: int,
    fallback: Optional[Dict[str, Any]],
    error_message: str,
) -> Dict[str, Any]:
    try:
        client = _client()
        response = await client.chat.completions.create(
            model=settings.openai_chat_model,
            response_format={"type": "json_object"},
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        raw = response.choices[0].message.content or ""
        return _safe_parse_json(raw, fallback)
    except openai.RateLimitError:
        logger.error("openai_rate_limit", endpoint=endpoint)
        raise
    except openai.APIError as exc:
        logger.error("openai_api_error", endpoint=endpoint, error=str(exc))
        raise RuntimeError(error_message) from exc


def _as_list(value: Any) -> List[Any]:
    if isinstance(value, list):
        return value
    if value in (None, ""):
        return []
    return [value]


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


# ── CV parsing ────────────────────────────────────────────────────────────────


async def parse_cv_text(cv_text: str) -> Dict[str, Any]:
    """
    Extract structured onboarding fields from raw CV text.

    List fields always come back as lists and string fields as strings
    (``None`` becomes ``""``). Required-field validation is left to the caller.
    """
    cv = _truncate(cv_text.strip(), _MAX_CV_CHARS)
    fallback: Dict[str, Any] = {}
    system = (
        "You are a CV parsing engine. Extract information from the CV text. "
        "Return ONLY a JSON object with these exact keys:\n"
        '  "fullName", "email", "phone", "location", "summary": strings,\n'
        '  "skills": array of strings,\n'
        '  "workExperience": array of {"title", "company", "duration", "description"},\n'
        '  "education": array of {"degree", "institution", "year"},\n'
        '  "suggestedRoles": array of 10-15 common job titles this person fits,\n'
        '  "projects", "accomplishments", "awards", "certifications", "languages", '
        '"interests", "publications", "volunteerWork", "additionalSections": arrays,\n'
        '  "linkedin", "github", "portfolio": strings (empty if absent).\n'
        "Use empty strings or arrays for anything not present. Do not invent data."
    )
    result = await _chat_json(
        "parse_cv",
        system,
        cv,
        temperature=0.1,
        max_tokens=settings.openai_max_tokens_parse,
        fallback=fallback,
        error_message="CV parsing failed",
    )
    for key in CV_LIST_FIELDS:
        result[key] = _as_list(result.get(key))
    for key in CV_STRING_FIELDS:
        result[key] = _as_str(result.get(key)).strip()
    return result


# ── Auto-apply documents ──────────────────────────────────────────────────────


def _job_brief(job: Dict[str, Any]) -> str:
    return _truncate(json.dumps(job, default=str), _MAX_JOB_CHARS)


async def generate_cv_data(profile: Dict[str, Any], job: Dict[str, Any]) -> Dict[str, Any]:
    """
    Produce CV content tailored to a job from the onboarding profile.

    Never adds experience that is not in the profile. The result is emailed
    to employers, so an unparseable or empty reply raises RuntimeError.
    """
    system = (
        "You are a professional CV writer. Using ONLY the candidate profile, "
        "produce a CV tailored to the job. NEVER fabricate experience, employers, "
        "degrees or certifications. Return ONLY a JSON object with keys:\n"
        '  "personalDetails": {"name", "title", "email", "phone", "location", '
        '"linkedin", "github", "portfolio"},\n'
        '  "summary": 3-4 sentence professional summary,\n'
        '  "roles": array of strings,\n'
        '  "experience": array of {"role", "company", "years", "bullets": [..]},\n'
        '  "education": array of {"degree", "institution", "years"},\n'
        '  "skills": up to 15 strings most relevant to the job,\n'
        '  "projects": array of {"title", "description"},\n'
        '  "certifications": array of {"name", "issuer", "year"},\n'
        '  "accomplishments", "languages", "interests": arrays of strings.'
    )
    result = await _chat_json(
        "generate_cv",
        system,
        (
            f"## Job\n{_job_brief(job)}\n\n"
            f"## Candidate Profile\n{_truncate(json.dumps(profile, default=str), _MAX_CV_CHARS)}"
        ),
        temperature=0.4,
        max_tokens=settings.openai_max_tokens_documents,
        fallback=None,
        error_message="CV generation failed",
    )
    if not isinstance(result.get("personalDetails"), dict):
        result["personalDetails"] = {}
    result["summary"] = _as_str(result.get("summary"))
    for key in ("roles", "experience", "education", "skills", "projects",
                "certifications", "accomplishments", "languages", "interests"):
        result[key] = _as_list(result.get(key))
    result["skills"] = result["skills"][:15]

    if not _as_str(result["personalDetails"].get("name")).strip():
        raise RuntimeError("Generated CV has no candidate name")
    if not result["experience"] and not result["summary"].strip():
        raise RuntimeError("Generated CV has no experience or summary")
    return result


async def generate_cover_letter(
    profile: Dict[str, Any],
    job: Dict[str, Any],
    cv_data: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Email-format cover letter: subject, opening, 1-3 body paragraphs, closing, signoff."""
    system = (
        "You write concise, specific cover letters to be sent as the body of an "
        "application email. Use only facts from the candidate profile. "
        "Return ONLY a JSON object with keys:\n"
        '  "subject": email subject line,\n'
        '  "opening": greeting and first paragraph,\n'
        '  "body1", "body2", "body3": paragraphs (body3 may be empty),\n'
        '  "highlights": 2-3 short bullet strings,\n'
        '  "closing": final paragraph,\n'
        '  "signoff": e.g. "Kind regards".'
    )
    user = f"## Job\n{_job_brief(job)}\n\n## Candidate Profile\n{json.dumps(profile, default=str)}"
    if cv_data:
        user += f"\n\n## Tailored CV\n{json.dumps(cv_data, default=str)}"
    result = await _chat_json(
        "generate_cover_letter",
        system,
        _truncate(user, _MAX_PROMPT_CHARS),
        temperature=0.5,
        max_tokens=settings.openai_max_tokens_documents,
        fallback=None,
        error_message="Cover letter generation failed",
    )
    for key in ("subject", "opening", "body1", "body2", "body3", "closing", "signoff"):
        result[key] = _as_str(result.get(key)).strip()
    if not any(result[key] for key in ("body1", "body2", "body3")):
        raise RuntimeError("Generated cover letter has no body paragraphs")
    result["highlights"] = [_as_str(h) for h in _as_list(result.get("highlights"))][:3]
    return result


# ── Career tools ──────────────────────────────────────────────────────────────


async def career_coach(profile_summary: str) -> Dict[str, Any]:
    """
    Career guidance for a profile. Raises RuntimeError if any top-level
    section is missing from the model output.
    """
    system = (
        "You are an experienced career coach for the African and global job market. "
        "Return ONLY a JSON object with keys:\n"
        '  "personalizedPaths": array of {"title", "description", "timeframe", "steps", '
        '"requiredSkills", "potentialRoles", "salaryRange"},\n'
        '  "skillGaps": array of {"skill", "priority", "currentLevel", "targetLevel", '
        '"resources", "learningPath", "estimatedTime"},\n'
        '  "insights": {"opportunities", "warnings", "tips"},\n'
        '  "marketInsights": {"industryTrends", "jobGrowth", "salaryExpectations", '
        '"demandSkills"}.'
    )
    result = await _chat_json(
        "career_coach",
        system,
        _truncate(profile_summary, _MAX_PROMPT_CHARS),
        temperature=0.7,
        max_tokens=settings.openai_max_tokens_coach,
        fallback={},
        error_message="Career coaching failed",
    )
    missing = [key for key in CAREER_COACH_KEYS if key not in result]
    if missing:
        logger.warning("career_coach_incomplete", missing=missing)
        raise RuntimeError("Invalid response structure from AI")
    return result


async def run_prompt(prompt: str, *, temperature: float, max_tokens: int, endpoint: str) -> str:
    """Send a free-form prompt and return the raw completion text."""
    try:
        client = _client()
        response = await client.chat.completions.create(
            model=settings.openai_chat_model,
            messages=[{"role": "user", "content": _truncate(prompt, _MAX_PROMPT_CHARS)}],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        return response.choices[0].message.content or ""
    except openai.RateLimitError:
        logger.error("openai_rate_limit", endpoint=endpoint)
        raise
    except openai.APIError as exc:
        logger.error("openai_api_error", endpoint=endpoint, error=str(exc))
        raise RuntimeError("AI request failed") from exc


def risk_level_for(score: int) -> str:
    if score >= 80:
        return "LOW"
    if score >= 60:
        return "MEDIUM"
    if score >= 40:
        return "HIGH"
    return "CRITICAL"


async def detect_scam(text: str, company_name: Optional[str] = None) -> Dict[str, Any]:
    """
    Score how trustworthy a job posting or recruiter email looks.

    trustScore is clamped to 0..100 and riskLevel is always derived from it.
    """
    fallback = {
        "trustScore": 50,
        "redFlags": [],
        "warnings": [],
        "safeIndicators": [],
        "analysis": "",
    }
    system = (
        "You are a job-scam detection expert. Analyse the text for recruitment "
        "fraud: upfront payments, vague company details, personal email domains, "
        "unrealistic pay, urgency pressure, requests for sensitive data. "
        "Any request for payment from the applicant is CRITICAL. "
        "Return ONLY a JSON object with keys:\n"
        '  "trustScore": integer 0-100 (100 = safe),\n'
        '  "riskLevel": "LOW" (80-100), "MEDIUM" (60-79), "HIGH" (40-59) or "CRITICAL" (0-39),\n'
        '  "redFlags", "warnings", "safeIndicators": arrays of strings,\n'
        '  "analysis": short paragraph.'
    )
    user = _truncate(text, _MAX_JOB_CHARS)
    if company_name:
        user = f"Company: {company_name}\n\n{user}"
    result = await _chat_json(
        "scam_detector",
        system,
        user,
        temperature=0.2,
        max_tokens=1500,
        fallback=fallback,
        error_message="Scam analysis failed",
    )
    score = result.get("trustScore", 50)
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        score = 50
    score = int(max(0, min(100, score)))
    result["trustScore"] = score
    result["riskLevel"] = risk_level_for(score)
    for key in ("redFlags", "warnings", "safeIndicators"):
        result[key] = _as_list(result.get(key))
    result["analysis"] = _as_str(result.get("analysis"))
    return result


# ── Job submissions ───────────────────────────────────────────────────────────


async def parse_job_posting(text: str) -> List[Dict[str, Any]]:
    """Turn pasted job-posting text into one or more structured job dicts."""
    system = (
        "You convert job postings into structured data. A text may contain several "
        'jobs. Return ONLY a JSON object {"jobs": [...]} where each job has:\n'
        '  "title", "role": strings; "related_roles": array of strings;\n'
        f'  "sector": one of {json.dumps(SECTORS)};\n'
        '  "ai_enhanced_sectors": array of sectors;\n'
        '  "company": {"name", "website", "industry"};\n'
        '  "location": {"city", "state", "country", "remote": boolean};\n'
        f'  "employment_type": one of {json.dumps(EMPLOYMENT_TYPES)};\n'
        f'  "experience_level": one of {json.dumps(EXPERIENCE_LEVELS)};\n'
        '  "skills_required", "ai_enhanced_skills": arrays of strings;\n'
        '  "description": string; "responsibilities", "qualifications", "benefits": arrays;\n'
        '  "salary_range": {"min", "max", "currency", "period"};\n'
        '  "application": {"method": "url"|"email"|"phone", "url" (https://), '
        '"email" (mailto:), "phone" (tel:)};\n'
        '  "posted_date", "deadline": ISO dates or null.\n'
        "Use null for unknown values. Do not invent contact details."
    )
    result = await _chat_json(
        "parse_job_posting",
        system,
        _truncate(text.strip(), _MAX_JOB_CHARS),
        temperature=0.1,
        max_tokens=settings.openai_max_tokens_parse,
        fallback={"jobs": []},
        error_message="Job parsing failed",
    )
    jobs = [j for j in _as_list(result.get("jobs")) if isinstance(j, dict) and j.get("title")]
    for job in jobs:
        job["ai_enhanced_roles"] = []
        job["source"] = {"platform": "Text Parse", "group_name": "Manual Input"}
        if job.get("sector") not in SECTORS:
            job["sector"] = None
        if job.get("employment_type") not in EMPLOYMENT_TYPES:
            job["employment_type"] = None
        if job.get("experience_level") not in EXPERIENCE_LEVELS:
            job["experience_level"] = None
        for key in ("related_roles", "ai_enhanced_sectors", "skills_required",
                    "ai_enhanced_skills", "responsibilities", "qualifications", "benefits"):
            job[key] = _as_list(job.get(key))
    return jobs
