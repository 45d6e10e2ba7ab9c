"""
Periodic purge of expired data.

Deletes swag requests past their retention deadline, login codes that
expired without being verified, and sessions past their expiry. Runs as
a background asyncio task for the lifetime of the app.

Unverified codes count toward the OTP rate limits until they are purged
here, so a short interval shortens the effective lookback of the
issuance window for addresses whose codes have already expired.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from swagdesk import db
from swagdesk.config import CLEANUP_INTERVAL
from swagdesk.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CleanupResult:
    requests: int
    sessions: int


async def purge_expired(now: datetime) -> CleanupResult:
    """One cleanup pass against the app database."""
    requests = await db.delete_expired_requests(now)
    sessions = await SessionStore(db.get_db()).delete_expired(now)
    return CleanupResult(requests=requests, sessions=sessions)


class CleanupWorker:
    def __init__(
        self,
        *,
        interval: float = CLEANUP_INTERVAL,
        now: Callable[[], datetime] = db.utcnow,
    ) -> None:
        self._interval = interval
        self._now = now
        self._task: asyncio.Task[None] | None = None

    # ── Lifecycle ──────────────────────────────────────────────────────

    async def start(self) -> None:
        """Run one pass right away, then keep purging every interval."""
        await self._tick()
        self._task = asyncio.create_task(self._loop(), name="expired-data-cleanup")
        logger.info("Cleanup worker started (every %ds)", self._interval)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None
            logger.info("Cleanup worker stopped")

    # ── Background loop ───────────────────────────────────────────────

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                await self._tick()
            except Exception:
                logger.exception("Cleanup tick failed, will retry")

    async def _tick(self) -> None:
        result = await purge_expired(self._now())
        if result.requests or result.sessions:
            logger.info(
                "Purged %d expired request(s) and %d admin session row(s)",
                result.requests, result.sessions,
            )
