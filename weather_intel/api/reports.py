"""Report submission and history endpoints."""

from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from pydantic import BaseModel, Field

from weather_intel.api.deps import get_report_service
from weather_intel.models import ReportRecord
from weather_intel.services.delivery import DeliveryOutcome
from weather_intel.services.errors import (
    CityNotFoundError,
    SubmissionValidationError,
    WeatherFetchError,
)
from weather_intel.services.export import export_reports_csv
from weather_intel.services.reports import ReportService, ReportSubmission, SubmissionResult


router = APIRouter(prefix="/reports", tags=["reports"])


class ReportSubmissionPayload(BaseModel):
    # Defaults keep missing fields out of FastAPI's own 422 so every field gets a readable message
    full_name: str = ""
    email: str = ""
    city: str = ""
    user_id: Optional[str] = Field(default=None, description="Opaque id from the upstream auth layer")


def _delivery_json(outcome: DeliveryOutcome) -> dict[str, Any]:
    return {
        "succeeded": outcome.succeeded,
        "method_used": outcome.method_used,
        "delivered": outcome.delivered,
        "attempts": [
            {"method": a.method, "succeeded": a.succeeded, "error": a.error} for a in outcome.attempts
        ],
    }


def _result_json(result: SubmissionResult) -> dict[str, Any]:
    return {
        "report": result.record.model_dump(mode="json") if result.stored else None,
        "weather": result.snapshot.as_dict(),
        "advisory": result.advisory,
        "delivery": _delivery_json(result.delivery),
        "notice": result.notice,
    }


@router.post("", status_code=201)
def submit_report(
    payload: ReportSubmissionPayload,
    service: ReportService = Depends(get_report_service),
) -> dict[str, Any]:
    """Fetch the weather for a city, store the report and email it to the submitter."""
    submission = ReportSubmission(
        full_name=payload.full_name,
        email=payload.email,
        city=payload.city,
        user_id=payload.user_id,
    )
    try:
        result = service.submit(submission)
    except SubmissionValidationError as exc:
        raise HTTPException(status_code=422, detail={"message": exc.message, "errors": exc.errors})
    except CityNotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message)
    except WeatherFetchError as exc:
        raise HTTPException(status_code=502, detail=exc.message)

    body = _result_json(result)
    if not result.stored:
        raise HTTPException(status_code=500, detail={"message": result.storage_error, **body})
    return body


@router.get("", response_model=list[ReportRecord])
def list_reports(
    email: Optional[str] = Query(None),
    limit: int = Query(100, ge=1, le=500),
    service: ReportService = Depends(get_report_service),
) -> list[ReportRecord]:
    return service.list_reports(email=email, limit=limit)


@router.get("/export.csv")
def export_reports(
    email: Optional[str] = Query(None),
    limit: int = Query(500, ge=1, le=5000),
    service: ReportService = Depends(get_report_service),
) -> Response:
    content = export_reports_csv(service.list_reports(email=email, limit=limit))
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="weather_reports.csv"'},
    )


@router.get("/{report_id}", response_model=ReportRecord)
def get_report(report_id: int, service: ReportService = Depends(get_report_service)) -> ReportRecord:
    record = service.get_report(report_id)
    if not record:
        raise HTTPException(status_code=404, detail="report_not_found")
    return record


__all__ = ["router"]
