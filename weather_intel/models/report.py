"""Persisted weather report submissions."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class ReportRecord(SQLModel, table=True):
    """One submitted report: who asked, where, what the weather was, what we advised."""

    __tablename__ = "weather_reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: Optional[str] = Field(default=None, max_length=64, index=True)
    full_name: str = Field(max_length=255)
    email: str = Field(max_length=254, index=True)
    city: str = Field(max_length=255, description="City exactly as submitted")
    location_name: str = Field(max_length=255, description="Location resolved by the weather provider")
    email_valid: bool = Field(default=False)
    temperature_c: float
    condition: str = Field(max_length=128)
    humidity: Optional[int] = None
    wind_kph: Optional[float] = None
    aqi: Optional[float] = Field(default=None, description="PM2.5; null when the provider had none")
    advisory: str = Field(default="")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), nullable=False, index=True)


__all__ = ["ReportRecord"]
