"""
Per-email limits on admin login codes.

Counts are derived from the ``admin_sessions`` rows at query time, so
there is no counter state to keep in sync. Two limits apply:

  • issuance     – 5 codes per address per 60 minutes
  • verification – 5 abandoned codes per address per 15 minutes

Check-then-write is not atomic: concurrent requests for the same address
can all pass a check before any of them inserts, so the issuance limit
may be exceeded by a small margin.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from swagdesk.db import utcnow
from swagdesk.services.session_store import SessionStore

MAX_CODES_PER_WINDOW = 5
ISSUANCE_WINDOW = timedelta(minutes=60)
ISSUANCE_RETRY_AFTER = 3600  # seconds

MAX_ABANDONED_CODES = 5
VERIFICATION_WINDOW = timedelta(minutes=15)
VERIFICATION_RETRY_AFTER = 900  # seconds


@dataclass(frozen=True)
class IssuanceAllowance:
    allowed: bool
    remaining: int


@dataclass(frozen=True)
class VerificationAllowance:
    allowed: bool


class OtpRateLimiter:
    def __init__(
        self, store: SessionStore, *, now: Callable[[], datetime] = utcnow
    ) -> None:
        self._store = store
        self._now = now

    async def check_issuance_allowed(self, email: str) -> IssuanceAllowance:
        since = self._now() - ISSUANCE_WINDOW
        count = await self._store.count_issued_since(email, since)
        return IssuanceAllowance(
            allowed=count < MAX_CODES_PER_WINDOW,
            remaining=max(0, MAX_CODES_PER_WINDOW - count),
        )

    async def check_verification_allowed(self, email: str) -> VerificationAllowance:
        now = self._now()
        count = await self._store.count_abandoned_since(
            email, now - VERIFICATION_WINDOW, now
        )
        return VerificationAllowance(allowed=count < MAX_ABANDONED_CODES)
