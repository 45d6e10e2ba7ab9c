"""
Admin authentication – one-time codes by email, then opaque session tokens.

Flow:

1.  ``OtpIssuer.issue`` checks the address, applies the issuance limit,
    stores a six digit code and emails it.
2.  ``OtpVerifier.verify`` applies the verification limit, matches the code
    against an unexpired, unverified record and turns that record into a
    24 hour session.
3.  ``SessionValidator`` answers "is this token a live session?" for every
    protected endpoint, and deletes sessions on logout.

Nothing here holds state between calls: the store handle, the clock and
the email sender are all passed in.
"""

from __future__ import annotations

import logging
import re
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable

from email_validator import EmailNotValidError, validate_email

from swagdesk.config import ADMIN_EMAIL_DOMAIN
from swagdesk.db import utcnow
from swagdesk.errors import (
    DomainNotAllowed,
    InvalidCodeFormat,
    InvalidEmail,
    InvalidOrExpiredCode,
    MissingFields,
    RateLimited,
    StoreUnavailable,
)
from swagdesk.services.email import send_otp_email
from swagdesk.services.otp_limits import (
    ISSUANCE_RETRY_AFTER,
    VERIFICATION_RETRY_AFTER,
    OtpRateLimiter,
)
from swagdesk.services.session_store import SessionStore

logger = logging.getLogger(__name__)

CODE_TTL = timedelta(minutes=10)
SESSION_TTL = timedelta(hours=24)
SESSION_TOKEN_BYTES = 32  # 256 bits → 64 hex chars

_CODE_RE = re.compile(r"[0-9]{6}")

Clock = Callable[[], datetime]
CodeSender = Callable[[str, str], Awaitable[bool]]


@dataclass(frozen=True)
class IssuedSession:
    token: str
    expires_at: datetime

    @property
    def cookie_max_age_seconds(self) -> int:
        return int(SESSION_TTL.total_seconds())


# ── Helpers ───────────────────────────────────────────────────────────────


def normalize_email(raw: str | None) -> str:
    return (raw or "").strip().lower()


def is_valid_email(email: str) -> bool:
    """Syntax check only; no DNS lookups."""
    if not email:
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def generate_code() -> str:
    """Uniformly random code in 000000–999999."""
    return f"{secrets.randbelow(1_000_000):06d}"


def generate_session_token() -> str:
    return secrets.token_hex(SESSION_TOKEN_BYTES)


# ── Issuer ────────────────────────────────────────────────────────────────


class OtpIssuer:
    def __init__(
        self,
        store: SessionStore,
        limiter: OtpRateLimiter,
        *,
        send_code: CodeSender = send_otp_email,
        admin_domain: str = ADMIN_EMAIL_DOMAIN,
        now: Clock = utcnow,
    ) -> None:
        self._store = store
        self._limiter = limiter
        self._send_code = send_code
        self._admin_domain = admin_domain.lower()
        self._now = now

    async def issue(self, email_raw: str | None) -> None:
        email = normalize_email(email_raw)
        if not is_valid_email(email):
            raise InvalidEmail()

        if email.rsplit("@", 1)[1] != self._admin_domain:
            raise DomainNotAllowed(self._admin_domain)

        allowance = await self._limiter.check_issuance_allowed(email)
        if not allowance.allowed:
            logger.warning("OTP issuance limit reached for %s", email)
            raise RateLimited(
                "Too many OTP requests. Please try again later.",
                retry_after=ISSUANCE_RETRY_AFTER,
            )

        code = generate_code()
        issued_at = self._now()
        await self._store.add_code(
            email, code, issued_at=issued_at, expires_at=issued_at + CODE_TTL
        )

        # The code is stored either way; a failed send only means the
        # admin has to ask for another one.
        if not await self._send_code(email, code):
            logger.error("Failed to send OTP email to %s", email)
        else:
            logger.info(
                "OTP issued to %s (%d left this hour)", email, allowance.remaining - 1
            )


# ── Verifier ──────────────────────────────────────────────────────────────


class OtpVerifier:
    def __init__(
        self,
        store: SessionStore,
        limiter: OtpRateLimiter,
        *,
        now: Clock = utcnow,
    ) -> None:
        self._store = store
        self._limiter = limiter
        self._now = now

    async def verify(self, email_raw: str | None, code_raw: str | None) -> IssuedSession:
        email = normalize_email(email_raw)
        code = (code_raw or "").strip()
        if not email or not code:
            raise MissingFields()

        if not _CODE_RE.fullmatch(code):
            raise InvalidCodeFormat()

        allowance = await self._limiter.check_verification_allowed(email)
        if not allowance.allowed:
            logger.warning("OTP verification limit reached for %s", email)
            raise RateLimited(
                "Too many failed attempts. Please request a new OTP.",
                retry_after=VERIFICATION_RETRY_AFTER,
            )

        now = self._now()
        record = await self._store.find_pending_code(email, code, now)
        if record is None:
            raise InvalidOrExpiredCode()

        session = IssuedSession(
            token=generate_session_token(),
            expires_at=now + SESSION_TTL,
        )
        if not await self._store.consume_code(record.id, session.token, session.expires_at):
            # Another request verified the same record first
            raise InvalidOrExpiredCode()

        try:
            purged = await self._store.purge_unverified(email, keep_id=record.id)
        except StoreUnavailable:
            logger.warning("Could not purge unused OTPs for %s", email)
        else:
            if purged:
                logger.debug("Purged %d unused OTP(s) for %s", purged, email)

        logger.info("Admin session started for %s", email)
        return session


# ── Session validation ────────────────────────────────────────────────────


class SessionValidator:
    def __init__(self, store: SessionStore, *, now: Clock = utcnow) -> None:
        self._store = store
        self._now = now

    async def is_valid(self, token: str | None) -> bool:
        if not token:
            return False
        return await self._store.find_session(token, self._now()) is not None

    async def logout(self, token: str | None) -> None:
        if not token:
            return
        await self._store.delete_session(token)


# ── Facade ────────────────────────────────────────────────────────────────


class AdminAuthService:
    """The four operations the API layer uses, wired to one store."""

    def __init__(
        self,
        store: SessionStore,
        *,
        send_code: CodeSender = send_otp_email,
        admin_domain: str = ADMIN_EMAIL_DOMAIN,
        now: Clock = utcnow,
    ) -> None:
        limiter = OtpRateLimiter(store, now=now)
        self.issuer = OtpIssuer(
            store, limiter, send_code=send_code, admin_domain=admin_domain, now=now
        )
        self.verifier = OtpVerifier(store, limiter, now=now)
        self.sessions = SessionValidator(store, now=now)

    async def issue_otp(self, email: str | None) -> None:
        await self.issuer.issue(email)

    async def verify_otp(self, email: str | None, code: str | None) -> IssuedSession:
        return await self.verifier.verify(email, code)

    async def is_authenticated(self, token: str | None) -> bool:
        return await self.sessions.is_valid(token)

    async def logout(self, token: str | None) -> None:
        await self.sessions.logout(token)
