"""Tests for deterministic job/profile scoring."""

from __future__ import annotations

from typing import Any

import pytest

from app.services.match_engine import (
    CORE_CAP,
    ROLE_AI_POINTS,
    ROLE_EXACT_POINTS,
    ROLE_RELATED_POINTS,
    SKILLS_CAP,
    score_job,
)


def _job(**overrides: Any) -> dict[str, Any]:
    job: dict[str, Any] = {
        "role": "Backend Engineer",
        "related_roles": ["Software Engineer"],
        "ai_enhanced_roles": [],
        "skills_required": [],
        "ai_enhanced_skills": [],
        "sector": None,
        "location": None,
        "experience_level": None,
        "salary_range": None,
        "employment_type": None,
    }
    job.update(overrides)
    return job


def _profile(**overrides: Any) -> dict[str, Any]:
    profile: dict[str, Any] = {
        "target_roles": [],
        "cv_skills": [],
        "preferred_locations": [],
        "sector": None,
        "experience_level": None,
        "salary_min": None,
        "job_type": None,
    }
    profile.update(overrides)
    return profile


@pytest.mark.unit
class TestRoles:
    """Role points."""

    def test_exact_role(self) -> None:
        """The job's own role in the target roles scores the exact points."""
        result = score_job(_job(), _profile(target_roles=["backend engineer"]))
        assert result.breakdown["rolesScore"] == ROLE_EXACT_POINTS
        assert result.breakdown["rolesReason"] == "role exact"

    def test_comma_separated_role(self) -> None:
        """Any role in a comma separated role string counts as exact."""
        job = _job(role="DevOps Engineer, Backend Engineer")
        result = score_job(job, _profile(target_roles=["Backend Engineer"]))
        assert result.breakdown["rolesScore"] == ROLE_EXACT_POINTS

    def test_related_role(self) -> None:
        """A related role scores less than an exact one."""
        result = score_job(_job(), _profile(target_roles=["Software Engineer"]))
        assert result.breakdown["rolesScore"] == ROLE_RELATED_POINTS

    def test_ai_role(self) -> None:
        """AI-suggested roles score the lowest role tier."""
        job = _job(ai_enhanced_roles=["Platform Engineer"])
        result = score_job(job, _profile(target_roles=["platform engineer"]))
        assert result.breakdown["rolesScore"] == ROLE_AI_POINTS

    def test_no_role(self) -> None:
        """No overlap scores nothing."""
        result = score_job(_job(), _profile(target_roles=["Nurse"]))
        assert result.breakdown["rolesScore"] == 0
        assert result.score == 0


@pytest.mark.unit
class TestSkills:
    """Skill points and the skills cap."""

    def test_required_skills(self) -> None:
        """Each required skill matched is worth ten points."""
        job = _job(skills_required=["Python", "SQL"])
        result = score_job(job, _profile(cv_skills=["python", "sql", "go"]))
        assert result.breakdown["skillsScore"] == 20
        assert result.breakdown["skillsReason"] == "2 required skills matched"

    def test_skills_capped(self) -> None:
        """Skill points never exceed the cap."""
        skills = ["a", "b", "c", "d", "e"]
        result = score_job(_job(skills_required=skills), _profile(cv_skills=skills))
        assert result.breakdown["skillsScore"] == SKILLS_CAP

    def test_ai_skills_fill_remaining_capacity(self) -> None:
        """AI skills add five points each, only up to the cap."""
        job = _job(skills_required=["a", "b"], ai_enhanced_skills=["c", "d", "e"])
        result = score_job(job, _profile(cv_skills=["a", "b", "c", "d", "e"]))
        assert result.breakdown["skillsScore"] == SKILLS_CAP
        assert result.breakdown["skillsReason"] == "2 required + 3 ai skills matched"


@pytest.mark.unit
class TestSectorAndExtras:
    """Sector, location, experience, salary and type points."""

    def test_sector_exact_ignores_case(self) -> None:
        """Sector names compare normalised."""
        job = _job(sector="Telecommunications")
        result = score_job(job, _profile(sector="telecommunications"))
        assert result.breakdown["sectorScore"] == 40

    def test_sector_related(self) -> None:
        """Related sectors score half."""
        job = _job(sector="Telecommunications")
        result = score_job(job, _profile(sector="Information Technology & Software"))
        assert result.breakdown["sectorScore"] == 20

    def test_null_string_sector(self) -> None:
        """The legacy "null" sector string is treated as no sector."""
        result = score_job(_job(sector="null"), _profile(sector="null"))
        assert result.breakdown["sectorScore"] == 0

    def test_core_capped_at_80(self) -> None:
        """Roles + skills + sector together are capped."""
        job = _job(skills_required=["a", "b", "c"], sector="Telecommunications")
        profile = _profile(
            target_roles=["Backend Engineer"],
            cv_skills=["a", "b", "c"],
            sector="Telecommunications",
        )
        result = score_job(job, profile)
        assert result.score == CORE_CAP

    def test_location_from_object(self) -> None:
        """A location object matches on city, state or country."""
        job = _job(location={"city": "Ikeja", "state": "Lagos"})
        result = score_job(job, _profile(preferred_locations=["lagos"]))
        assert result.breakdown["locationScore"] == 10

    def test_salary_compares_job_max_to_user_min(self) -> None:
        """Salary points need the job max at or above the user's minimum."""
        job = _job(salary_range={"min": "100,000", "max": "NGN 500,000"})
        assert score_job(job, _profile(salary_min=500000)).breakdown["salaryScore"] == 5
        assert score_job(job, _profile(salary_min=600000)).breakdown["salaryScore"] == 0

    def test_any_employment_type(self) -> None:
        """A job open to any employment type always scores the type points."""
        result = score_job(_job(employment_type="Any"), _profile(job_type="Contract"))
        assert result.breakdown["typeScore"] == 5

    def test_perfect_match_is_100(self) -> None:
        """Every component maxed gives exactly 100."""
        job = _job(
            skills_required=["python"],
            sector="Telecommunications",
            location="Lagos",
            experience_level="Senior",
            salary_range={"max": 900000},
            employment_type="Full-time",
        )
        profile = _profile(
            target_roles=["Backend Engineer"],
            cv_skills=["Python"],
            sector="Telecommunications",
            preferred_locations=["Lagos"],
            experience_level="senior",
            salary_min=500000,
            job_type="full-time",
        )
        assert score_job(job, profile).score == 100
