"""
API Routes package.
"""
from fastapi import APIRouter

from app.api.routes.admin import router as admin_router
from app.api.routes.applications import router as applications_router
from app.api.routes.auth import router as auth_router
from app.api.routes.companies import router as companies_router
from app.api.routes.credits import router as credits_router
from app.api.routes.health import router as health_router
from app.api.routes.jobs import router as jobs_router
from app.api.routes.notifications import router as notifications_router
from app.api.routes.onboarding import router as onboarding_router
from app.api.routes.payments import router as payments_router
from app.api.routes.sitemaps import router as sitemaps_router
from app.api.routes.submissions import router as submissions_router
from app.api.routes.tools import router as tools_router
from app.api.routes.users import router as users_router

# Main API router
api_router = APIRouter()

# Include all routers
api_router.include_router(health_router)
api_router.include_router(auth_router)
api_router.include_router(users_router)
api_router.include_router(onboarding_router)
api_router.include_router(jobs_router)
api_router.include_router(applications_router)
api_router.include_router(companies_router)
api_router.include_router(submissions_router)
api_router.include_router(credits_router)
api_router.include_router(payments_router)
api_router.include_router(notifications_router)
api_router.include_router(tools_router)
api_router.include_router(admin_router)

__all__ = [
    "api_router",
    "sitemaps_router",
    "admin_router",
    "applications_router",
    "auth_router",
    "companies_router",
    "credits_router",
    "health_router",
    "jobs_router",
    "notifications_router",
    "onboarding_router",
    "payments_router",
    "submissions_router",
    "tools_router",
    "users_router",
]
