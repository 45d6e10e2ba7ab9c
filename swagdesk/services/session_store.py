"""
Persistence for admin login codes and the sessions they turn into.

Each row of ``admin_sessions`` starts life as an issued code and, once
verified, carries the session token instead. The rows double as the
event log the OTP rate limits are computed from.

Times are always passed in by the caller; no statement here reads the
database clock.
"""

from __future__ import annotations

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Iterator

import aiosqlite

from swagdesk.db import to_db_time
from swagdesk.errors import StoreUnavailable

logger = logging.getLogger(__name__)


@dataclass
class OtpRecord:
    id: int
    email: str
    code: str
    issued_at: str
    code_expires_at: str
    session_token: str | None = None
    session_expires_at: str | None = None

    @classmethod
    def from_row(cls, row: aiosqlite.Row) -> OtpRecord:
        return cls(
            id=row["id"],
            email=row["email"],
            code=row["code"],
            issued_at=row["issued_at"],
            code_expires_at=row["code_expires_at"],
            session_token=row["session_token"],
            session_expires_at=row["session_expires_at"],
        )


@contextlib.contextmanager
def _storage_errors(action: str) -> Iterator[None]:
    try:
        yield
    except aiosqlite.Error as exc:
        logger.error("Session store failed to %s: %s", action, exc)
        raise StoreUnavailable() from exc


class SessionStore:
    """Repository for the ``admin_sessions`` table."""

    def __init__(self, conn: aiosqlite.Connection) -> None:
        self._conn = conn

    # ── Issuance ───────────────────────────────────────────────────────

    async def add_code(
        self, email: str, code: str, *, issued_at: datetime, expires_at: datetime
    ) -> int:
        """Persist a freshly issued code; returns the new record id."""
        with _storage_errors("store code"):
            cur = await self._conn.execute(
                """
                INSERT INTO admin_sessions (email, code, issued_at, code_expires_at)
                VALUES (?, ?, ?, ?)
                """,
                (email, code, to_db_time(issued_at), to_db_time(expires_at)),
            )
            await self._conn.commit()
        return cur.lastrowid

    async def count_issued_since(self, email: str, since: datetime) -> int:
        with _storage_errors("count issued codes"):
            async with self._conn.execute(
                """
                SELECT COUNT(*) AS count FROM admin_sessions
                WHERE email = ? AND issued_at > ?
                """,
                (email, to_db_time(since)),
            ) as cur:
                row = await cur.fetchone()
        return row["count"] if row else 0

    async def count_abandoned_since(
        self, email: str, since: datetime, now: datetime
    ) -> int:
        """Codes issued after *since* that expired without ever being verified."""
        with _storage_errors("count abandoned codes"):
            async with self._conn.execute(
                """
                SELECT COUNT(*) AS count FROM admin_sessions
                WHERE email = ?
                  AND issued_at > ?
                  AND session_token IS NULL
                  AND code_expires_at < ?
                """,
                (email, to_db_time(since), to_db_time(now)),
            ) as cur:
                row = await cur.fetchone()
        return row["count"] if row else 0

    # ── Verification ───────────────────────────────────────────────────

    async def find_pending_code(
        self, email: str, code: str, now: datetime
    ) -> OtpRecord | None:
        """Most recently issued unexpired, unverified record matching email and code."""
        with _storage_errors("look up code"):
            async with self._conn.execute(
                """
                SELECT * FROM admin_sessions
                WHERE email = ?
                  AND code = ?
                  AND code_expires_at > ?
                  AND session_token IS NULL
                ORDER BY issued_at DESC, id DESC
                LIMIT 1
                """,
                (email, code, to_db_time(now)),
            ) as cur:
                row = await cur.fetchone()
        return OtpRecord.from_row(row) if row else None

    async def consume_code(
        self, record_id: int, token: str, session_expires_at: datetime
    ) -> bool:
        """
        Attach a session token to a record and clear its code in one statement.

        Returns False when the record was already consumed (or deleted)
        by someone else in the meantime.
        """
        with _storage_errors("start session"):
            cur = await self._conn.execute(
                """
                UPDATE admin_sessions
                SET session_token = ?, session_expires_at = ?, code = ''
                WHERE id = ? AND session_token IS NULL
                """,
                (token, to_db_time(session_expires_at), record_id),
            )
            await self._conn.commit()
        return cur.rowcount > 0

    async def purge_unverified(self, email: str, keep_id: int) -> int:
        """Delete every other unverified record for *email*."""
        with _storage_errors("purge unverified codes"):
            cur = await self._conn.execute(
                """
                DELETE FROM admin_sessions
                WHERE email = ? AND session_token IS NULL AND id != ?
                """,
                (email, keep_id),
            )
            await self._conn.commit()
        return cur.rowcount

    # ── Sessions ───────────────────────────────────────────────────────

    async def find_session(self, token: str, now: datetime) -> OtpRecord | None:
        with _storage_errors("look up session"):
            async with self._conn.execute(
                """
                SELECT * FROM admin_sessions
                WHERE session_token = ? AND session_expires_at > ?
                """,
                (token, to_db_time(now)),
            ) as cur:
                row = await cur.fetchone()
        return OtpRecord.from_row(row) if row else None

    async def delete_session(self, token: str) -> None:
        with _storage_errors("delete session"):
            await self._conn.execute(
                "DELETE FROM admin_sessions WHERE session_token = ?", (token,)
            )
            await self._conn.commit()

    # ── Maintenance ────────────────────────────────────────────────────

    async def delete_expired(self, now: datetime) -> int:
        """Drop codes that expired unverified and sessions past their expiry."""
        stamp = to_db_time(now)
        with _storage_errors("delete expired sessions"):
            cur = await self._conn.execute(
                """
                DELETE FROM admin_sessions
                WHERE (code_expires_at < ? AND session_token IS NULL)
                   OR (session_expires_at IS NOT NULL AND session_expires_at < ?)
                """,
                (stamp, stamp),
            )
            await self._conn.commit()
        return cur.rowcount
