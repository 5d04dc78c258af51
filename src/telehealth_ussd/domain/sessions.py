"""Domain models for USSD dialogs."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class ServiceContext(StrEnum):
    """Submenu family active while a dialog sits on step 2."""

    APPOINTMENT = "appointment"
    HEALTH_TIPS = "health_tips"
    CHECK_APPOINTMENTS = "check_appointments"


@dataclass(frozen=True)
class UssdSession:
    """Represents the state of one live USSD dialog."""

    session_id: str
    phone_number: str
    last_activity_at: datetime
    created_at: datetime
    step: int = 0
    service_context: ServiceContext | None = None
    history: tuple[str, ...] = ()
    service_code: str | None = None


@dataclass(frozen=True)
class AppointmentSummary:
    """Represents an upcoming appointment shown on the handset."""

    doctor_name: str
    specialization: str
    starts_at: datetime
    ends_at: datetime
    consultation_type: str
    status: str
