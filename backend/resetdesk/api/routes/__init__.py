"""API Routes module"""
from fastapi import APIRouter

from .auth import router as auth_router
from .requests import router as requests_router
from .personnel import router as personnel_router
from .stats import router as stats_router
from .logs import router as logs_router
from .settings import router as settings_router

# Main API router
api_router = APIRouter()

# Include all route modules
api_router.include_router(auth_router, tags=["Auth"])
api_router.include_router(requests_router, prefix="/requests", tags=["Requests"])
api_router.include_router(personnel_router, prefix="/personnel", tags=["Personnel"])
api_router.include_router(stats_router, tags=["Statistics"])
api_router.include_router(logs_router, prefix="/logs", tags=["Audit Log"])
api_router.include_router(settings_router, tags=["Settings"])

__all__ = ["api_router"]
