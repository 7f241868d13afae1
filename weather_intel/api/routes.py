"""Root API routers."""

from typing import Any

from fastapi import APIRouter

from weather_intel.core.config import settings

health_router = APIRouter(tags=["system"])


@health_router.get("/health", summary="Service health check")
async def healthcheck() -> dict[str, Any]:
    """Heartbeat plus the provider and relay setup this process started with."""

    return {
        "status": "ok",
        "weather_provider": "demo" if settings.weather_demo_mode else "weatherapi",
        "advisory_mode": settings.advisory_mode,
        "delivery_strategies": list(settings.delivery_strategies),
    }
