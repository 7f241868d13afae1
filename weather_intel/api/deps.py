"""API dependencies."""

from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends
from sqlmodel import Session

from weather_intel.db.session import get_session
from weather_intel.services.advisory import AdvisorySynthesizer, get_advisory_synthesizer
from weather_intel.services.delivery import DeliveryPipeline, build_pipeline
from weather_intel.services.notifications import NOTIFICATIONS
from weather_intel.services.reports import ReportService
from weather_intel.services.weather import WeatherProvider, get_weather_provider


def get_db() -> Generator[Session, None, None]:
    with get_session() as session:
        yield session


def get_weather() -> WeatherProvider:
    return get_weather_provider()


def get_synthesizer() -> AdvisorySynthesizer:
    return get_advisory_synthesizer()


def get_pipeline() -> DeliveryPipeline:
    return build_pipeline(listeners=[NOTIFICATIONS.record_delivery])


def get_report_service(
    session: Session = Depends(get_db),
    weather: WeatherProvider = Depends(get_weather),
    synthesizer: AdvisorySynthesizer = Depends(get_synthesizer),
    pipeline: DeliveryPipeline = Depends(get_pipeline),
) -> ReportService:
    return ReportService(session=session, weather=weather, synthesizer=synthesizer, pipeline=pipeline)
