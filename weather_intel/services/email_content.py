"""Plain-text report email."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from weather_intel.models import ReportRecord


@dataclass(frozen=True)
class OutboundEmail:
    recipient: str
    recipient_name: str
    subject: str
    body: str
    city: str


def format_aqi(aqi: Optional[float]) -> str:
    if aqi is None:
        return "N/A"
    return f"{aqi:g}"


def report_subject(city: str) -> str:
    return f"Weather Intelligence Report - {city}"


def compose_report_email(record: ReportRecord, generated_at: Optional[datetime] = None) -> OutboundEmail:
    generated_at = generated_at or record.created_at or datetime.now(timezone.utc)
    lines = [
        f"Hi {record.full_name},",
        "",
        "Thanks for submitting your details.",
        "",
        f"Here's the current weather for {record.city}:",
        "",
        f"- Temperature: {record.temperature_c:g}°C",
        f"- Condition: {record.condition}",
        f"- AQI: {format_aqi(record.aqi)}",
        "",
    ]
    if record.advisory:
        lines += [f"AI Weather Insight: {record.advisory}", ""]
    lines += [
        "Stay safe and take care!",
        "",
        "Thanks,",
        "Weather Intelligence Hub Team",
        "",
        "---",
        "This report was generated automatically based on real-time weather data.",
        f"Generated at: {generated_at:%Y-%m-%d %H:%M:%S} UTC",
    ]
    return OutboundEmail(
        recipient=record.email,
        recipient_name=record.full_name,
        subject=report_subject(record.city),
        body="\n".join(lines),
        city=record.city,
    )


__all__ = ["OutboundEmail", "compose_report_email", "format_aqi", "report_subject"]
