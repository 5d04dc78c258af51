"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from telehealth_ussd.config import Settings
from telehealth_ussd.services.appointments import (
    AppointmentDirectory,
    StaticAppointmentDirectory,
)
from telehealth_ussd.services.session_store import InMemorySessionStore, SessionStore
from telehealth_ussd.services.sweeper import SessionSweeper
from telehealth_ussd.services.ussd import UssdService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    session_store: SessionStore
    appointment_directory: AppointmentDirectory
    ussd_service: UssdService
    sweeper: SessionSweeper
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    timeout = resolved_settings.ussd_session_timeout
    session_store = InMemorySessionStore(timeout=timeout)
    appointment_directory = StaticAppointmentDirectory()
    ussd_service = UssdService(
        session_store=session_store,
        appointment_directory=appointment_directory,
    )
    sweeper = SessionSweeper(
        session_store=session_store,
        interval_seconds=resolved_settings.ussd_sweep_interval_seconds,
        timeout=timeout,
    )

    async def close_resources() -> None:
        await sweeper.stop()

    return AppContainer(
        settings=resolved_settings,
        session_store=session_store,
        appointment_directory=appointment_directory,
        ussd_service=ussd_service,
        sweeper=sweeper,
        close_resources=close_resources,
    )
