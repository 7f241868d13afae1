"""Shared fixtures: in-memory database, fake weather provider, recording relays."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from weather_intel import app
from weather_intel.api import deps
from weather_intel.models import ReportRecord  # noqa: F401  (registers the table)
from weather_intel.services.advisory import RuleBasedSynthesizer
from weather_intel.services.delivery import DeliveryPipeline, DeliveryStrategy
from weather_intel.services.email_content import OutboundEmail
from weather_intel.services.errors import DeliveryError
from weather_intel.services.weather import WeatherSnapshot


class FakeWeatherProvider:
    def __init__(self, snapshot: WeatherSnapshot | None = None, error: Exception | None = None) -> None:
        self.snapshot = snapshot or WeatherSnapshot(
            location="London", temperature_c=22.0, condition="Sunny", aqi=10.0
        )
        self.error = error
        self.calls: list[str] = []

    def fetch(self, city: str) -> WeatherSnapshot:
        self.calls.append(city)
        if self.error is not None:
            raise self.error
        return self.snapshot


class RecordingStrategy(DeliveryStrategy):
    def __init__(self, name: str, fail: bool = False) -> None:
        self.name = name
        self.fail = fail
        self.calls: list[OutboundEmail] = []

    def attempt(self, message: OutboundEmail) -> None:
        self.calls.append(message)
        if self.fail:
            raise DeliveryError(f"{self.name} unavailable")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def weather():
    return FakeWeatherProvider()


@pytest.fixture
def primary_relay():
    return RecordingStrategy("primary")


@pytest.fixture
def secondary_relay():
    return RecordingStrategy("secondary")


@pytest.fixture
def pipeline(primary_relay, secondary_relay):
    return DeliveryPipeline([primary_relay, secondary_relay])


@pytest.fixture
def client(session, weather, pipeline):
    app.dependency_overrides[deps.get_db] = lambda: session
    app.dependency_overrides[deps.get_weather] = lambda: weather
    app.dependency_overrides[deps.get_synthesizer] = RuleBasedSynthesizer
    app.dependency_overrides[deps.get_pipeline] = lambda: pipeline
    yield TestClient(app)
    app.dependency_overrides.clear()
