"""API router definitions."""

from fastapi import APIRouter

from .logs import router as logs_router
from .notifications import router as notifications_router
from .reports import router as reports_router
from .routes import health_router
from .weather import router as weather_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(weather_router)
api_router.include_router(reports_router)
api_router.include_router(notifications_router)
api_router.include_router(logs_router)

__all__ = ["api_router"]
