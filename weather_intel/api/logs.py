"""Recent log lines, for troubleshooting without shell access."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Query

from weather_intel.core.logging_config import get_log_buffer

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("")
def list_logs(
    limit: int = Query(100, ge=1, le=500),
    level: Optional[str] = Query(None, description="Only entries at this level, e.g. WARNING"),
) -> dict[str, list[dict[str, Any]]]:
    return {"logs": get_log_buffer(limit=limit, level=level)}


__all__ = ["router"]
