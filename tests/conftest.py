"""Pytest fixtures for the Weatherly push API."""

import json
import os
from collections.abc import Generator
from datetime import datetime, timezone
from unittest.mock import MagicMock

# Settings exige essas variáveis já no import do app
os.environ.setdefault("WEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("VAPID_PRIVATE_KEY", "test-vapid-private")
os.environ.setdefault("VAPID_PUBLIC_KEY", "test-vapid-public")
os.environ.setdefault("SQLALCHEMY_DATABASE_URI", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from pywebpush import WebPushException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.api import deps
from app.core.errors import ProviderError
from app.db.base import Base
from app.models.subscription import PushSubscription
from app.schemas.subscription import SubscriptionRecord
from app.schemas.weather import WeatherSnapshot
from app.services.notifier import WeatherNotifier
from app.services.push import PushService
from app.services.subscription_store import SubscriptionStore

# 12:30 UTC = 14:30 em Paris (horário de verão)
FIXED_NOW = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)


def hour_entry(hour: int, temp: float = 20.0, date: str = "2024-06-01") -> dict:
    return {
        "time": f"{date} {hour:02d}:00",
        "local_hour": hour,
        "temp_c": temp + hour,
        "condition": {"text": "Partly cloudy", "icon": "//cdn.weatherapi.com/116.png", "code": 1003},
        "cloud": 40,
        "chance_of_rain": 15,
        "wind_kph": 12.5,
        "wind_dir": "NW",
    }


def snapshot_payload(city="Paris", tz_id="Europe/Paris", hours=range(24), alerts=(), days=1) -> dict:
    """JSON no formato da Weather API (já com local_hour). Cada dia extra soma 100 às temperaturas."""
    forecastday = [{"date": "2024-06-01", "hour": [hour_entry(h) for h in hours]}]
    for d in range(1, days):
        date = f"2024-06-{1 + d:02d}"
        forecastday.append({"date": date, "hour": [hour_entry(h, temp=20.0 + 100 * d, date=date) for h in range(24)]})
    return {
        "location": {"name": city, "region": "", "country": "", "tz_id": tz_id},
        "current": {"temp_c": 21.0, "condition": {"text": "Sunny", "icon": "//cdn/113.png"}},
        "forecast": {"forecastday": forecastday},
        "alerts": {"alert": list(alerts)},
    }


@pytest.fixture()
def make_snapshot():
    def _make(**kwargs) -> WeatherSnapshot:
        return WeatherSnapshot.from_provider(snapshot_payload(**kwargs))
    return _make


@pytest.fixture()
def sample_alert() -> dict:
    return {
        "headline": "Flood Warning issued June 1 at 1:00PM CEST",
        "event": "Flood Warning",
        "severity": "Moderate",
        "effective": "2024-06-01T13:00:00+02:00",
        "expires": "2024-06-02T01:00:00+02:00",
        "desc": "Heavy rain may cause flooding of low-lying areas.",
        "instruction": "Avoid driving through flooded roads.",
    }


class FakeWeatherClient:
    """Devolve snapshots (ou erros) por cidade, sem rede."""

    def __init__(self):
        self.snapshots = {}
        self.errors = {}
        self.calls = []

    def fetch_for_location(self, location):
        self.calls.append(location.canonical)
        if location.city in self.errors:
            raise self.errors[location.city]
        if location.city not in self.snapshots:
            raise ProviderError(f"No data for {location.city}")
        return self.snapshots[location.city]

    def search(self, query):
        return [{"name": query, "region": "", "country": ""}]

    def forecast_by_city(self, name, region=None, country=None):
        raise ProviderError("City weather fetch failed")

    def forecast_by_coords(self, lat, lon):
        raise ProviderError("Coordinates weather fetch failed")


class PushOutbox:
    """Substitui pywebpush.webpush: guarda o que foi enviado e simula falhas por endpoint."""

    def __init__(self):
        self.sent = []
        self.failures = {}

    def __call__(self, subscription_info, data, vapid_private_key, vapid_claims):
        endpoint = subscription_info["endpoint"]
        if endpoint in self.failures:
            raise self.failures[endpoint]
        self.sent.append((endpoint, json.loads(data)))

    def fail_with_status(self, endpoint: str, status: int):
        response = MagicMock()
        response.status_code = status
        self.failures[endpoint] = WebPushException(f"Push failed: {status}", response=response)

    def for_endpoint(self, endpoint: str) -> list:
        return [payload for e, payload in self.sent if e == endpoint]


@pytest.fixture()
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine, tables=[PushSubscription.__table__])
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine, tables=[PushSubscription.__table__])


@pytest.fixture()
def store(db_engine) -> SubscriptionStore:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    return SubscriptionStore(TestingSessionLocal)


@pytest.fixture()
def add_subscription(store):
    def _add(endpoint: str, location: str = "Paris,Ile-de-France,France", **extra):
        return store.upsert(
            endpoint,
            SubscriptionRecord(
                keys={"p256dh": f"p256-{endpoint}", "auth": f"auth-{endpoint}"},
                location=location,
                created_at=FIXED_NOW,
                **extra,
            ),
        )
    return _add


@pytest.fixture()
def push_outbox(monkeypatch) -> PushOutbox:
    outbox = PushOutbox()
    monkeypatch.setattr("app.services.push.webpush", outbox)
    return outbox


@pytest.fixture()
def push_service(store, push_outbox) -> PushService:
    return PushService(store, vapid_private_key="test-key", vapid_claims_email="mailto:test@example.com")


@pytest.fixture()
def weather_client() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture()
def notifier(store, weather_client, push_service) -> WeatherNotifier:
    return WeatherNotifier(store, weather_client, push_service, clock=lambda: FIXED_NOW)


@pytest.fixture()
def client(store, weather_client, push_service, notifier) -> Generator[TestClient, None, None]:
    from app.main import create_app

    app = create_app()
    app.dependency_overrides[deps.get_store] = lambda: store
    app.dependency_overrides[deps.get_weather_client] = lambda: weather_client
    app.dependency_overrides[deps.get_push_service] = lambda: push_service
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    with TestClient(app) as test_client:
        yield test_client
