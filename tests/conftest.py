"""Shared test fixtures."""

from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from telehealth_ussd.api.app import create_app
from telehealth_ussd.config import Settings
from telehealth_ussd.containers import AppContainer
from telehealth_ussd.domain.sessions import ServiceContext, UssdSession
from telehealth_ussd.services.appointments import StaticAppointmentDirectory
from telehealth_ussd.services.session_store import InMemorySessionStore
from telehealth_ussd.services.sweeper import SessionSweeper
from telehealth_ussd.services.ussd import UssdService

START = datetime(2024, 1, 10, 9, 0, tzinfo=UTC)


@dataclass
class FakeClock:
    """Clock that only moves when a test advances it."""

    now: datetime = START

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


@dataclass
class ExplodingAppointmentDirectory:
    """Directory that fails every lookup."""

    calls: list[str] = field(default_factory=list)

    def list_upcoming(self, phone_number: str) -> list:
        self.calls.append(phone_number)
        raise RuntimeError("directory unavailable")


def make_session(
    step: int = 0,
    service_context: ServiceContext | None = None,
    history: tuple[str, ...] = (),
    session_id: str = "session-1",
) -> UssdSession:
    return UssdSession(
        session_id=session_id,
        phone_number="+23276000000",
        last_activity_at=START,
        created_at=START,
        step=step,
        service_context=service_context,
        history=history,
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(admin_token="admin-token", environment="test")


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def session_store(settings: Settings) -> InMemorySessionStore:
    return InMemorySessionStore(timeout=settings.ussd_session_timeout)


@pytest.fixture
def ussd_service(
    session_store: InMemorySessionStore, clock: FakeClock
) -> UssdService:
    return UssdService(
        session_store=session_store,
        appointment_directory=StaticAppointmentDirectory(),
        clock=clock,
    )


@pytest.fixture
def container(
    settings: Settings,
    session_store: InMemorySessionStore,
    ussd_service: UssdService,
    clock: FakeClock,
) -> AppContainer:
    sweeper = SessionSweeper(
        session_store=session_store,
        interval_seconds=settings.ussd_sweep_interval_seconds,
        timeout=settings.ussd_session_timeout,
        clock=clock,
    )

    async def close_resources() -> None:
        await sweeper.stop()

    return AppContainer(
        settings=settings,
        session_store=session_store,
        appointment_directory=ussd_service.appointment_directory,
        ussd_service=ussd_service,
        sweeper=sweeper,
        close_resources=close_resources,
    )


@pytest.fixture
def client(container: AppContainer) -> TestClient:
    return TestClient(create_app(container))
