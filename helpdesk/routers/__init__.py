"""API routers for the helpdesk backend."""
from fastapi import APIRouter

from . import accounts, audit, auth, dashboards, error_reports, health, profile


def get_api_router() -> APIRouter:
    """Return the root API router."""

    api_router = APIRouter()
    api_router.include_router(health.router)
    api_router.include_router(auth.router)
    api_router.include_router(dashboards.router)
    api_router.include_router(accounts.router)
    api_router.include_router(profile.router)
    api_router.include_router(audit.router)
    api_router.include_router(error_reports.router)
    api_router.include_router(error_reports.admin_router)
    return api_router
