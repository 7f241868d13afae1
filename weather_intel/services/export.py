"""CSV export of stored reports."""

from __future__ import annotations

import csv
import io
from typing import Iterable

from weather_intel.models import ReportRecord
from weather_intel.services.email_content import format_aqi

CSV_HEADERS = [
    "Full Name",
    "Email",
    "City",
    "Email Valid",
    "Temperature (°C)",
    "Condition",
    "AQI",
    "Timestamp",
]


def export_reports_csv(records: Iterable[ReportRecord]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(CSV_HEADERS)
    for record in records:
        writer.writerow(
            [
                record.full_name,
                record.email,
                record.city,
                "true" if record.email_valid else "false",
                record.temperature_c,
                record.condition,
                record.aqi if record.aqi is not None else format_aqi(None),
                record.created_at.isoformat(),
            ]
        )
    return buffer.getvalue()


__all__ = ["CSV_HEADERS", "export_reports_csv"]
