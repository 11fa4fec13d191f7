"""
Deterministic job <-> profile scoring.

Pure functions only: no database, no I/O. ``MatchService`` persists the
results; tests exercise this module directly.

Points:
  roles    70 exact / 40 related / 30 ai-enhanced
  skills   10 per required skill, 5 per ai skill, capped at 30
  sector   40 exact / 20 related
  (roles + skills + sector capped at 80)
  location 10, experience 5, salary 5, employment type 5
"""
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from app.utils.dates import utcnow
from app.utils.jobs import parse_location
from app.utils.normalize import normalize_list, normalize_string, to_numeric
from app.utils.sectors import are_sectors_related

ROLE_EXACT_POINTS = 70
ROLE_RELATED_POINTS = 40
ROLE_AI_POINTS = 30
REQUIRED_SKILL_POINTS = 10
AI_SKILL_POINTS = 5
SKILLS_CAP = 30
SECTOR_EXACT_POINTS = 40
SECTOR_RELATED_POINTS = 20
CORE_CAP = 80
LOCATION_POINTS = 10
EXPERIENCE_POINTS = 5
SALARY_POINTS = 5
TYPE_POINTS = 5


@dataclass
class MatchResult:
    score: int
    breakdown: Dict[str, Any] = field(default_factory=dict)
    computed_at: datetime = field(default_factory=utcnow)
    cached: bool = False


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def _location_terms(raw: Any) -> List[str]:
    if isinstance(raw, str):
        norm = normalize_string(raw)
        return [norm] if norm else []
    if isinstance(raw, dict):
        return [normalize_string(t) for t in parse_location(raw).match_terms()]
    return []


def _score_roles(job: Any, target_roles: List[str]):
    job_role = normalize_string(_get(job, "role"))
    job_roles = [r.strip() for r in job_role.split(",") if r.strip()] if job_role else []

    if any(r in target_roles for r in job_roles):
        return ROLE_EXACT_POINTS, "role exact"
    if any(r in target_roles for r in normalize_list(_get(job, "related_roles"))):
        return ROLE_RELATED_POINTS, "role related"
    if any(r in target_roles for r in normalize_list(_get(job, "ai_enhanced_roles"))):
        return ROLE_AI_POINTS, "role ai"
    return 0, "no role match"


def _score_skills(job: Any, cv_skills: List[str]):
    skills = set(cv_skills)
    required_matches = sum(1 for s in normalize_list(_get(job, "skills_required")) if s in skills)
    score = required_matches * REQUIRED_SKILL_POINTS

    ai_matches = 0
    if score < SKILLS_CAP:
        ai_matches = sum(1 for s in normalize_list(_get(job, "ai_enhanced_skills")) if s in skills)
        capacity = (SKILLS_CAP - score) // AI_SKILL_POINTS
        score += min(ai_matches, capacity) * AI_SKILL_POINTS

    score = min(SKILLS_CAP, score)

    parts = []
    if required_matches:
        parts.append(f"{required_matches} required")
    if ai_matches:
        parts.append(f"{ai_matches} ai")
    reason = f"{' + '.join(parts)} skills matched" if parts else "no skills match"
    return score, reason


def _score_sector(job_sector: Any, user_sector: Any):
    if not job_sector or not user_sector:
        return 0, "no sector match"
    if normalize_string(job_sector) == normalize_string(user_sector):
        return SECTOR_EXACT_POINTS, "sector exact match"
    if are_sectors_related(str(user_sector), str(job_sector)):
        return SECTOR_RELATED_POINTS, "sector related match"
    return 0, "no sector match"


def score_job(job: Any, profile: Any) -> MatchResult:
    """
    Score a job (model or dict) against an onboarding profile (model or dict).

    The result is always within 0..100.
    """
    target_roles = normalize_list(_get(profile, "target_roles") or [])
    cv_skills = normalize_list(_get(profile, "cv_skills") or [])
    preferred_locations = normalize_list(_get(profile, "preferred_locations") or [])

    roles_score, roles_reason = _score_roles(job, target_roles)
    skills_score, skills_reason = _score_skills(job, cv_skills)
    user_sector = _get(profile, "sector")
    # Older profiles stored a missing sector as the string "null".
    if user_sector == "null":
        user_sector = None
    sector_score, sector_reason = _score_sector(_get(job, "sector"), user_sector)

    job_locations = _location_terms(_get(job, "location"))
    location_score = (
        LOCATION_POINTS
        if any(loc in preferred_locations for loc in job_locations)
        else 0
    )

    job_exp = normalize_string(_get(job, "experience_level"))
    user_exp = normalize_string(_get(profile, "experience_level"))
    experience_score = EXPERIENCE_POINTS if job_exp and job_exp == user_exp else 0

    salary_range = _get(job, "salary_range") or {}
    job_max = to_numeric(salary_range.get("max")) if isinstance(salary_range, dict) else None
    user_min = to_numeric(_get(profile, "salary_min"))
    salary_score = (
        SALARY_POINTS
        if job_max is not None and user_min is not None and job_max >= user_min
        else 0
    )

    job_type = normalize_string(_get(job, "employment_type"))
    user_type = normalize_string(_get(profile, "job_type"))
    type_score = TYPE_POINTS if job_type == "any" or (job_type and job_type == user_type) else 0

    core = min(CORE_CAP, roles_score + skills_score + sector_score)
    total = core + location_score + experience_score + salary_score + type_score

    breakdown = {
        "rolesScore": roles_score,
        "rolesReason": roles_reason,
        "skillsScore": skills_score,
        "skillsReason": skills_reason,
        "sectorScore": sector_score,
        "sectorReason": sector_reason,
        "locationScore": location_score,
        "experienceScore": experience_score,
        "salaryScore": salary_score,
        "typeScore": type_score,
    }
    return MatchResult(score=max(0, min(100, total)), breakdown=breakdown)
