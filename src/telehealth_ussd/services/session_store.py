"""Session storage for USSD dialogs."""

import logging
import threading
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from typing import Protocol

from telehealth_ussd.domain.sessions import UssdSession

DEFAULT_SESSION_TIMEOUT = timedelta(minutes=5)

logger = logging.getLogger(__name__)


class SessionStore(Protocol):
    """Storage interface for live USSD sessions."""

    def get_or_create(
        self,
        session_id: str,
        phone_number: str,
        now: datetime,
        service_code: str | None = None,
    ) -> UssdSession:
        """Return the live session for an id, starting a fresh one if needed."""

    def save(self, session: UssdSession) -> None:
        """Overwrite the stored state for a session."""

    def delete(self, session_id: str) -> bool:
        """Remove a session; return whether one was present."""

    def sweep_expired(self, now: datetime, timeout: timedelta | None = None) -> int:
        """Remove idle sessions and return how many were removed."""

    def get(self, session_id: str) -> UssdSession | None:
        """Return a session without touching its activity timestamp."""

    def list_all(self) -> list[UssdSession]:
        """Return every live session without touching activity timestamps."""


@dataclass
class InMemorySessionStore(SessionStore):
    """Process-local session store guarded by a single lock."""

    timeout: timedelta
    _sessions: dict[str, UssdSession]
    _lock: threading.Lock

    def __init__(self, timeout: timedelta = DEFAULT_SESSION_TIMEOUT) -> None:
        self.timeout = timeout
        self._sessions = {}
        self._lock = threading.Lock()

    def get_or_create(
        self,
        session_id: str,
        phone_number: str,
        now: datetime,
        service_code: str | None = None,
    ) -> UssdSession:
        """Refresh a live session or replace a missing/stale one."""
        with self._lock:
            existing = self._sessions.get(session_id)
            if existing is not None and not self._is_expired(existing, now):
                refreshed = replace(
                    existing,
                    last_activity_at=max(existing.last_activity_at, now),
                )
                self._sessions[session_id] = refreshed
                return refreshed

            created = UssdSession(
                session_id=session_id,
                phone_number=phone_number,
                last_activity_at=now,
                created_at=now,
                service_code=service_code,
            )
            self._sessions[session_id] = created
        logger.info(
            "New USSD session created",
            extra={"session_id": session_id, "replaced_stale": existing is not None},
        )
        return created

    def save(self, session: UssdSession) -> None:
        """Store the session; the activity timestamp never moves backwards."""
        with self._lock:
            existing = self._sessions.get(session.session_id)
            if existing and existing.last_activity_at > session.last_activity_at:
                session = replace(session, last_activity_at=existing.last_activity_at)
            self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        """Remove a session if present."""
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def sweep_expired(self, now: datetime, timeout: timedelta | None = None) -> int:
        """Evict every session idle for longer than the timeout."""
        limit = timeout if timeout is not None else self.timeout
        with self._lock:
            expired = [
                session_id
                for session_id, session in list(self._sessions.items())
                if now - session.last_activity_at > limit
            ]
            for session_id in expired:
                del self._sessions[session_id]
        return len(expired)

    def get(self, session_id: str) -> UssdSession | None:
        """Return a session if present."""
        with self._lock:
            return self._sessions.get(session_id)

    def list_all(self) -> list[UssdSession]:
        """Return a snapshot of all sessions."""
        with self._lock:
            return list(self._sessions.values())

    def _is_expired(self, session: UssdSession, now: datetime) -> bool:
        return now - session.last_activity_at > self.timeout
