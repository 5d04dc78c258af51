"""Request handling for USSD dialogs."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from telehealth_ussd.domain.menus import UssdReply
from telehealth_ussd.domain.sessions import AppointmentSummary
from telehealth_ussd.services.appointments import AppointmentDirectory
from telehealth_ussd.services.menu import advance, needs_appointments
from telehealth_ussd.services.session_store import SessionStore

logger = logging.getLogger(__name__)


class MalformedUssdRequestError(ValueError):
    """Raised when a request lacks the identifiers needed to track a dialog."""


def utc_now() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(tz=UTC)


@dataclass
class UssdService:
    """Drives one dialog turn: load the session, advance the menu, persist."""

    session_store: SessionStore
    appointment_directory: AppointmentDirectory
    clock: Callable[[], datetime] = field(default=utc_now)

    def handle(
        self,
        session_id: str | None,
        phone_number: str | None,
        text: str | None,
        service_code: str | None = None,
    ) -> UssdReply:
        """Handle one gateway request and return the screen to show."""
        if not session_id or not session_id.strip():
            raise MalformedUssdRequestError("Missing sessionId")
        if not phone_number or not phone_number.strip():
            raise MalformedUssdRequestError("Missing phoneNumber")

        raw_text = text or ""
        session = self.session_store.get_or_create(
            session_id=session_id,
            phone_number=phone_number,
            now=self.clock(),
            service_code=service_code,
        )
        appointments: list[AppointmentSummary] = []
        if needs_appointments(session, raw_text):
            appointments = self.appointment_directory.list_upcoming(
                session.phone_number
            )

        transition = advance(session, raw_text, appointments)

        if transition.reply.terminal:
            self.session_store.delete(session_id)
            logger.info(
                "USSD session ended",
                extra={"session_id": session_id, "step": session.step},
            )
        else:
            self.session_store.save(transition.session)
        return transition.reply
