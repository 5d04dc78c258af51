"""Appointment lookup for the check-appointments menu."""

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from telehealth_ussd.domain.sessions import AppointmentSummary


class AppointmentDirectory(Protocol):
    """Lookup interface for a caller's upcoming appointments."""

    def list_upcoming(self, phone_number: str) -> list[AppointmentSummary]:
        """Return upcoming appointments for a handset number."""


def _placeholder_appointments() -> list[AppointmentSummary]:
    return [
        AppointmentSummary(
            doctor_name="Dr. Smith",
            specialization="General Medicine",
            starts_at=datetime(2024, 1, 15, 14, 0, tzinfo=UTC),
            ends_at=datetime(2024, 1, 15, 14, 30, tzinfo=UTC),
            consultation_type="video",
            status="confirmed",
        ),
        AppointmentSummary(
            doctor_name="Dr. Johnson",
            specialization="Gynecology",
            starts_at=datetime(2024, 1, 20, 10, 0, tzinfo=UTC),
            ends_at=datetime(2024, 1, 20, 10, 30, tzinfo=UTC),
            consultation_type="video",
            status="confirmed",
        ),
    ]


@dataclass
class StaticAppointmentDirectory(AppointmentDirectory):
    """Directory returning the same fixed appointments for every caller."""

    appointments: list[AppointmentSummary] = field(
        default_factory=_placeholder_appointments
    )

    def list_upcoming(self, phone_number: str) -> list[AppointmentSummary]:
        """Return the configured appointments."""
        return list(self.appointments)
