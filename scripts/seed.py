"""
Seed script - populates the database with test data for development.

Usage:
    python -m scripts.seed

Creates a test user with a completed profile and credits, an admin,
a few published companies and a spread of active jobs, then scores
the jobs against the test user's profile.

This script is IDEMPOTENT - running it twice won't create duplicates.
It checks for existing data before inserting.
"""
import asyncio
from datetime import timedelta

from sqlalchemy import select

from app.core.database import async_session_maker, init_db
from app.core.security import hash_password
from app.models.company import Company
from app.models.credits import UserCredits
from app.models.job import JOB_STATUS_ACTIVE, Job
from app.models.onboarding import OnboardingData
from app.models.user import User
from app.services.submission_service import build_duplicate_hash
from app.utils.dates import utc_today, utcnow
from app.utils.slugs import unique_job_slug


# ─── Users ─────────────────────────────────────────────────────

TEST_USER = {
    "email": "dev@jobmeter.app",
    "password": "password123",
    "full_name": "Dev User",
    "phone": "+2348000000000",
    "location": "Lagos, Nigeria",
}

ADMIN_USER = {
    "email": "admin@jobmeter.app",
    "password": "admin123",
    "full_name": "Admin User",
}

TEST_PROFILE = {
    "cv_name": "Dev User",
    "cv_email": "dev@jobmeter.app",
    "cv_location": "Lagos, Nigeria",
    "cv_summary": "Backend engineer with five years of Python and cloud experience.",
    "cv_roles": ["Backend Engineer", "Software Engineer"],
    "cv_skills": ["Python", "FastAPI", "PostgreSQL", "Docker", "AWS"],
    "target_roles": ["Backend Engineer", "Software Engineer"],
    "preferred_locations": ["Lagos", "Remote"],
    "salary_min": 400000,
    "salary_max": 900000,
    "experience_level": "Mid-level",
    "job_type": "Full-time",
    "remote_preference": "Hybrid",
    "sector": "Technology",
}


# ─── Companies ─────────────────────────────────────────────────

COMPANIES = [
    {
        "name": "Paystack",
        "slug": "paystack",
        "website": "https://paystack.com",
        "industry": "Fintech",
        "location": "Lagos, Nigeria",
        "description": "Modern online and offline payments for Africa",
    },
    {
        "name": "Andela",
        "slug": "andela",
        "website": "https://andela.com",
        "industry": "Technology",
        "location": "Remote",
        "description": "Global talent marketplace for engineering teams",
    },
    {
        "name": "Lagos University Teaching Hospital",
        "slug": "lagos-university-teaching-hospital",
        "website": "https://luth.gov.ng",
        "industry": "Healthcare",
        "location": "Lagos, Nigeria",
        "description": "Federal teaching hospital in Idi-Araba, Lagos",
    },
]


# ─── Sample Jobs ───────────────────────────────────────────────

SAMPLE_JOBS = [
    {
        "title": "Senior Backend Engineer",
        "role": "Backend Engineer",
        "related_roles": ["Software Engineer", "Python Developer"],
        "sector": "Technology",
        "company": {"name": "Paystack", "website": "https://paystack.com"},
        "location": {"city": "Lagos", "state": "Lagos", "country": "Nigeria", "remote": False},
        "employment_type": "Full-time",
        "experience_level": "Senior",
        "skills_required": ["Python", "PostgreSQL", "Docker", "AWS"],
        "description": "<p>Build and scale the services behind <strong>payments</strong> for Africa.</p>",
        "salary_range": {"min": 800000, "max": 1500000, "currency": "NGN", "period": "monthly"},
        "application": {"email": "careers@paystack.example", "url": None},
        "source_url": "https://paystack.com/careers/senior-backend-engineer",
    },
    {
        "title": "Software Engineer",
        "role": "Software Engineer",
        "related_roles": ["Backend Engineer"],
        "sector": "Technology",
        "company": {"name": "Andela"},
        "location": {"city": None, "state": None, "country": "Nigeria", "remote": True},
        "employment_type": "Full-time",
        "experience_level": "Mid-level",
        "skills_required": ["Python", "FastAPI", "React"],
        "description": "Fully remote role working with global product teams.",
        "salary_range": {"min": 500000, "max": 900000, "currency": "NGN", "period": "monthly"},
        "application": {"url": "https://andela.com/apply"},
        "source_url": "https://andela.com/careers/software-engineer",
    },
    {
        "title": "Registered Nurse",
        "role": "Nurse",
        "related_roles": ["Staff Nurse"],
        "sector": "Healthcare",
        "company": {"name": "Lagos University Teaching Hospital"},
        "location": {"city": "Idi-Araba", "state": "Lagos", "country": "Nigeria", "remote": False},
        "employment_type": "Full-time",
        "experience_level": "Entry-level",
        "skills_required": ["Patient Care", "BLS"],
        "description": "Provide patient care across medical and surgical wards.",
        "application": {"email": "recruitment@luth.example"},
        "source_url": "https://luth.gov.ng/vacancies/registered-nurse",
    },
    {
        "title": "Data Analyst",
        "role": "Data Analyst",
        "related_roles": ["Business Analyst"],
        "sector": "Technology",
        "company": {"name": "Paystack"},
        "location": {"city": "Ikeja", "state": "Lagos", "country": "Nigeria", "remote": False},
        "employment_type": "Contract",
        "experience_level": "Mid-level",
        "skills_required": ["SQL", "Python", "Tableau"],
        "description": "Turn payments data into product and risk insights.",
        "application": {"email": "data-hiring@paystack.example"},
        "source_url": "https://paystack.com/careers/data-analyst",
    },
]


async def seed():
    """Run the seed process."""
    print("Seeding database...")

    # Initialize tables
    await init_db()
    print("  Tables created")

    async with async_session_maker() as db:

        # ── Users ──────────────────────────────────────────
        existing = await db.execute(select(User).where(User.email == TEST_USER["email"]))
        test_user = existing.scalar_one_or_none()
        if test_user:
            print("  Users already exist, skipping...")
        else:
            test_user = User(
                email=TEST_USER["email"],
                password_hash=hash_password(TEST_USER["password"]),
                full_name=TEST_USER["full_name"],
                phone=TEST_USER["phone"],
                location=TEST_USER["location"],
                email_verified=True,
            )
            admin_user = User(
                email=ADMIN_USER["email"],
                password_hash=hash_password(ADMIN_USER["password"]),
                full_name=ADMIN_USER["full_name"],
                is_admin=True,
                email_verified=True,
            )
            db.add_all([test_user, admin_user])
            await db.flush()

            db.add(OnboardingData(user_id=test_user.id, completed_at=utcnow(), **TEST_PROFILE))
            db.add(
                UserCredits(
                    user_id=test_user.id,
                    balance=10,
                    daily_credits_available=1,
                    daily_credits_last_awarded=utc_today(),
                )
            )
            await db.flush()
            print(f"  Created users: {TEST_USER['email']}, {ADMIN_USER['email']}")

        # ── Companies ──────────────────────────────────────
        existing = await db.execute(select(Company).limit(1))
        if existing.scalar_one_or_none():
            print("  Companies already exist, skipping...")
        else:
            now = utcnow()
            for c in COMPANIES:
                db.add(Company(is_published=True, published_at=now, **c))
            await db.flush()
            print(f"  Created {len(COMPANIES)} companies")

        # ── Jobs ───────────────────────────────────────────
        existing = await db.execute(select(Job).limit(1))
        if existing.scalar_one_or_none():
            print("  Jobs already exist, skipping...")
        else:
            now = utcnow()
            for i, job_data in enumerate(SAMPLE_JOBS):
                slug = await unique_job_slug(db, job_data["title"], job_data["company"])
                db.add(
                    Job(
                        slug=slug,
                        status=JOB_STATUS_ACTIVE,
                        duplicate_hash=build_duplicate_hash(
                            job_data["title"], job_data["company"], job_data["source_url"]
                        ),
                        posted_date=now - timedelta(days=i),
                        created_at=now - timedelta(days=i),  # Stagger creation dates
                        **job_data,
                    )
                )
                await db.flush()
            print(f"  Created {len(SAMPLE_JOBS)} jobs")

        # Commit everything
        await db.commit()

    # ── Matches ────────────────────────────────────────
    # Scored after commit so the matcher sees the seeded profile and jobs
    from app.services.match_service import MatchService

    match_service = MatchService()
    async with async_session_maker() as db:
        jobs = (await db.execute(select(Job.id))).scalars().all()
        for job_id in jobs:
            await match_service.match_new_job(db, job_id)
    print(f"  Scored {len(jobs)} jobs against onboarded profiles")

    print()
    print("Seed complete!")
    print(f"  Login: {TEST_USER['email']} / {TEST_USER['password']}")
    print(f"  Admin: {ADMIN_USER['email']} / {ADMIN_USER['password']}")


if __name__ == "__main__":
    asyncio.run(seed())
