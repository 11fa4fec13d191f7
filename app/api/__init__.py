"""
HTTP layer: the ``/api/v1`` router, root-level sitemaps and shared dependencies.
"""
from app.api.routes import api_router, sitemaps_router
from app.api.deps import (
    get_admin_user,
    get_current_user,
    get_optional_user,
    require_cron_key,
)

__all__ = [
    "api_router",
    "sitemaps_router",
    "get_current_user",
    "get_admin_user",
    "get_optional_user",
    "require_cron_key",
]
