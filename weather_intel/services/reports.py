"""Report submission: validate, fetch, advise, store, deliver."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from weather_intel.db.session import get_session
from weather_intel.models import ReportRecord
from weather_intel.services.advisory import AdvisorySynthesizer, get_advisory_synthesizer
from weather_intel.services.delivery import DeliveryOutcome, DeliveryPipeline, build_pipeline
from weather_intel.services.email_content import compose_report_email
from weather_intel.services.errors import ReportStorageError, SubmissionValidationError
from weather_intel.services.notifications import NOTIFICATIONS
from weather_intel.services.validation import validate_email, validate_submission
from weather_intel.services.weather import WeatherProvider, WeatherSnapshot, get_weather_provider

logger = logging.getLogger(__name__)

DELAYED_NOTICE = "Your report may be delayed."

T = TypeVar("T")


@dataclass
class ReportSubmission:
    full_name: str
    email: str
    city: str
    user_id: Optional[str] = None


@dataclass
class SubmissionResult:
    snapshot: WeatherSnapshot
    advisory: str
    record: ReportRecord
    delivery: DeliveryOutcome
    stored: bool = True
    storage_error: Optional[str] = None

    @property
    def notice(self) -> Optional[str]:
        if not self.delivery.delivered:
            return DELAYED_NOTICE
        return None


class ReportService:
    def __init__(
        self,
        session: Session | None = None,
        weather: WeatherProvider | None = None,
        synthesizer: AdvisorySynthesizer | None = None,
        pipeline: DeliveryPipeline | None = None,
    ) -> None:
        self.session = session
        self.weather = weather or get_weather_provider()
        self.synthesizer = synthesizer or get_advisory_synthesizer()
        self.pipeline = pipeline or build_pipeline(listeners=[NOTIFICATIONS.record_delivery])

    def submit(self, submission: ReportSubmission) -> SubmissionResult:
        """Run one submission end to end.

        Validation and weather errors abort before anything is stored or sent.
        Storage and delivery are independent: a failed write is reported on the
        result and the email still goes out; delivery never raises.
        """
        errors = validate_submission(submission.full_name, submission.email, submission.city)
        if errors:
            raise SubmissionValidationError(errors)

        city = submission.city.strip()
        snapshot = self.weather.fetch(city)
        advisory = self.synthesizer.synthesize(snapshot)

        email = submission.email.strip().lower()
        record = ReportRecord(
            user_id=submission.user_id,
            full_name=submission.full_name.strip(),
            email=email,
            city=city,
            location_name=snapshot.location or city,
            email_valid=validate_email(email),
            temperature_c=snapshot.temperature_c,
            condition=snapshot.condition,
            humidity=snapshot.humidity,
            wind_kph=snapshot.wind_kph,
            aqi=snapshot.aqi,
            advisory=advisory,
        )

        stored = True
        storage_error = None
        try:
            self._save(record)
        except ReportStorageError as exc:
            stored = False
            storage_error = exc.message

        delivery = self.pipeline.deliver(compose_report_email(record))
        return SubmissionResult(
            snapshot=snapshot,
            advisory=advisory,
            record=record,
            delivery=delivery,
            stored=stored,
            storage_error=storage_error,
        )

    def list_reports(self, email: str | None = None, limit: int = 100) -> list[ReportRecord]:
        def _list(db: Session) -> list[ReportRecord]:
            stmt = select(ReportRecord)
            if email:
                stmt = stmt.where(ReportRecord.email == email.strip().lower())
            stmt = stmt.order_by(ReportRecord.created_at.desc(), ReportRecord.id.desc()).limit(limit)
            return list(db.exec(stmt).all())

        return self._with_session(_list)

    def get_report(self, report_id: int) -> ReportRecord | None:
        return self._with_session(lambda db: db.get(ReportRecord, report_id))

    def _save(self, record: ReportRecord) -> None:
        def _persist(db: Session) -> None:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("Failed to store report: %s", exc, exc_info=True, extra={"city": record.city})
                raise ReportStorageError() from exc
            logger.info("Stored report %s", record.id, extra={"report_id": record.id, "city": record.city})

        self._with_session(_persist)

    def _with_session(self, func: Callable[[Session], T]) -> T:
        if self.session is not None:
            return func(self.session)
        with get_session() as db:
            return func(db)


__all__ = ["DELAYED_NOTICE", "ReportSubmission", "SubmissionResult", "ReportService"]
