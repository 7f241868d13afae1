"""Weather Intelligence Hub FastAPI application package."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .api import api_router
from .core.config import settings
from .core.logging_config import setup_logging
from .db.session import init_db


def create_app() -> FastAPI:
    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Initializing %s API", settings.app_name)

    app = FastAPI(title=settings.app_name, version=settings.app_version)
    app.include_router(api_router, prefix=settings.api_prefix)

    @app.get("/", include_in_schema=False)
    async def root() -> dict[str, str]:
        return {
            "message": (
                f"{settings.app_name} API is online. POST "
                f"{settings.api_prefix}/reports to request a weather report."
            )
        }

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error for %s: %s", request.url.path, exc)
        return JSONResponse(
            status_code=500,
            content={"detail": "An unexpected error occurred. Please try again."},
        )

    @app.on_event("startup")
    def _bootstrap() -> None:
        init_db()
        if settings.weather_demo_mode:
            logger.warning("Weather demo mode is on; reports use generated data")

    return app


app = create_app()
