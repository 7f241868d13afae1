"""Delivery events for the front end to turn into toasts."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Query

from weather_intel.services.notifications import NOTIFICATIONS

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(limit: int = Query(20, ge=1, le=200)) -> dict[str, list[dict[str, Any]]]:
    items = [
        {
            "level": note.level,
            "message": note.message,
            "created_at": note.created_at.isoformat() + "Z",
            "context": note.context or {},
        }
        for note in NOTIFICATIONS.recent(limit)
    ]
    return {"notifications": items}


__all__ = ["router"]
