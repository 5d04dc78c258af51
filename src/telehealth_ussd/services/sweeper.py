"""Background eviction of idle USSD sessions."""

import asyncio
import contextlib
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from telehealth_ussd.services.session_store import SessionStore
from telehealth_ussd.services.ussd import utc_now

logger = logging.getLogger(__name__)


@dataclass
class SessionSweeper:
    """Periodically removes sessions idle beyond the timeout."""

    session_store: SessionStore
    interval_seconds: float
    timeout: timedelta
    clock: Callable[[], datetime] = field(default=utc_now)
    _task: asyncio.Task[None] | None = field(default=None, init=False, repr=False)

    def sweep_once(self, now: datetime | None = None) -> int:
        """Run a single sweep and return the number of evicted sessions."""
        removed = self.session_store.sweep_expired(now or self.clock(), self.timeout)
        if removed:
            logger.info("Evicted idle USSD sessions", extra={"count": removed})
        return removed

    async def run(self) -> None:
        """Sweep forever on the configured interval."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("USSD session sweep failed")

    def start(self) -> None:
        """Schedule the sweep loop on the running event loop."""
        if self._task is None or self._task.done():
            self._task = asyncio.create_task(self.run())

    async def stop(self) -> None:
        """Cancel the sweep loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
