"""
SQLite database layer using aiosqlite.

Stores swag requests and admin login sessions.
Tables are created automatically on first connect.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from pathlib import Path

import aiosqlite

from swagdesk.config import DB_PATH
from swagdesk.models import SwagRequest

logger = logging.getLogger(__name__)

# ── Module-level connection ───────────────────────────────────────────────

_db: aiosqlite.Connection | None = None


async def open_connection(path: str) -> aiosqlite.Connection:
    """Open a connection to *path* and make sure the schema exists."""
    if path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)

    conn = await aiosqlite.connect(path)
    conn.row_factory = aiosqlite.Row  # dict-like rows
    await conn.execute("PRAGMA journal_mode=WAL")
    await conn.execute("PRAGMA foreign_keys=ON")

    await conn.executescript(_SCHEMA)
    await conn.commit()
    return conn


async def init_db() -> None:
    """Open the database and create tables if they don't exist."""
    global _db
    _db = await open_connection(DB_PATH)
    logger.info("Database initialized at %s", DB_PATH)


async def close_db() -> None:
    """Close the database connection."""
    global _db
    if _db is not None:
        await _db.close()
        _db = None
        logger.info("Database connection closed")


def get_db() -> aiosqlite.Connection:
    """Return the active database connection (must call init_db first)."""
    assert _db is not None, "Database not initialized, call init_db() first"
    return _db


# ── Schema ────────────────────────────────────────────────────────────────

_SCHEMA = """
CREATE TABLE IF NOT EXISTS swag_requests (
    id              INTEGER PRIMARY KEY AUTOINCREMENT,
    name            TEXT NOT NULL,
    email           TEXT NOT NULL,
    phone           TEXT NOT NULL,
    address         TEXT NOT NULL,
    promo_code      TEXT,
    status          TEXT NOT NULL DEFAULT 'pending'
                    CHECK (status IN ('pending', 'approved', 'rejected')),
    created_at      TEXT NOT NULL,
    expires_at      TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_swag_requests_email ON swag_requests(email);
CREATE INDEX IF NOT EXISTS idx_swag_requests_status ON swag_requests(status);
CREATE INDEX IF NOT EXISTS idx_swag_requests_expires_at ON swag_requests(expires_at);

CREATE TABLE IF NOT EXISTS admin_sessions (
    id                  INTEGER PRIMARY KEY AUTOINCREMENT,
    email               TEXT NOT NULL,
    code                TEXT NOT NULL,
    issued_at           TEXT NOT NULL,
    code_expires_at     TEXT NOT NULL,
    session_token       TEXT UNIQUE,    -- NULL until the code is verified
    session_expires_at  TEXT
);

CREATE INDEX IF NOT EXISTS idx_admin_sessions_email ON admin_sessions(email);
"""


# ── Helpers ───────────────────────────────────────────────────────────────


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def to_db_time(dt: datetime) -> str:
    """
    Render a timestamp the way it is stored.

    Fixed-width UTC ISO-8601 with microseconds, so string comparison in
    SQL orders the same way as the datetimes themselves.
    """
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


def _row_to_request(row: aiosqlite.Row) -> SwagRequest:
    """Convert a database row to a SwagRequest model."""
    return SwagRequest(
        id=row["id"],
        name=row["name"],
        email=row["email"],
        phone=row["phone"],
        address=row["address"],
        promo_code=row["promo_code"],
        status=row["status"],
        created_at=row["created_at"],
        expires_at=row["expires_at"],
    )


# ══════════════════════════════════════════════════════════════════════════
#                    SWAG REQUEST REPOSITORY
# ══════════════════════════════════════════════════════════════════════════


async def count_requests_for_email(email: str) -> int:
    """Number of stored requests (any status) for an email address."""
    db = get_db()
    async with db.execute(
        "SELECT COUNT(*) AS count FROM swag_requests WHERE email = ?", (email,)
    ) as cur:
        row = await cur.fetchone()
    return row["count"] if row else 0


async def create_swag_request(
    name: str,
    email: str,
    phone: str,
    address: str,
    promo_code: str | None,
    *,
    now: datetime,
    retention: timedelta,
) -> SwagRequest:
    """Insert a new pending request and return it."""
    db = get_db()
    cur = await db.execute(
        """
        INSERT INTO swag_requests
            (name, email, phone, address, promo_code, status, created_at, expires_at)
        VALUES (?, ?, ?, ?, ?, 'pending', ?, ?)
        """,
        (
            name, email, phone, address, promo_code,
            to_db_time(now), to_db_time(now + retention),
        ),
    )
    await db.commit()
    return await get_swag_request(cur.lastrowid)  # type: ignore[return-value]


async def get_swag_request(request_id: int) -> SwagRequest | None:
    """Fetch a single request by ID."""
    db = get_db()
    async with db.execute(
        "SELECT * FROM swag_requests WHERE id = ?", (request_id,)
    ) as cur:
        row = await cur.fetchone()
    return _row_to_request(row) if row else None


async def list_active_requests(now: datetime) -> list[SwagRequest]:
    """All requests that have not reached their retention deadline, newest first."""
    db = get_db()
    async with db.execute(
        "SELECT * FROM swag_requests WHERE expires_at > ? ORDER BY created_at DESC, id DESC",
        (to_db_time(now),),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_request(r) for r in rows]


async def list_approved_requests(now: datetime) -> list[SwagRequest]:
    """Approved, unexpired requests, newest first."""
    db = get_db()
    async with db.execute(
        """
        SELECT * FROM swag_requests
        WHERE status = 'approved' AND expires_at > ?
        ORDER BY created_at DESC, id DESC
        """,
        (to_db_time(now),),
    ) as cur:
        rows = await cur.fetchall()
    return [_row_to_request(r) for r in rows]


async def set_request_status(request_id: int, status: str) -> bool:
    """Change a request's status. Returns True if the request exists."""
    db = get_db()
    cur = await db.execute(
        "UPDATE swag_requests SET status = ? WHERE id = ?", (status, request_id)
    )
    await db.commit()
    return cur.rowcount > 0


async def delete_swag_request(request_id: int) -> bool:
    """Delete a request. Returns True if a row was actually deleted."""
    db = get_db()
    cur = await db.execute("DELETE FROM swag_requests WHERE id = ?", (request_id,))
    await db.commit()
    return cur.rowcount > 0


async def delete_expired_requests(now: datetime) -> int:
    """Remove requests past their retention deadline; returns the count."""
    db = get_db()
    cur = await db.execute(
        "DELETE FROM swag_requests WHERE expires_at < ?", (to_db_time(now),)
    )
    await db.commit()
    return cur.rowcount
