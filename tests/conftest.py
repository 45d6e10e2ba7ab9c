"""
Shared test fixtures.

Provides:
  • an in-memory aiosqlite connection with the app schema, for service tests
  • a FastAPI TestClient wired to a temporary SQLite database (via the
    app lifespan), a recording email outbox and a no-op cleanup worker

Rate limiting by IP is disabled except where a test turns it back on.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import swagdesk.db as db_mod
from swagdesk.db import open_connection
from swagdesk.main import app
from swagdesk.services.session_store import SessionStore
from tests.mocks.services import FakeClock, Outbox, login_admin


# ── Helpers ────────────────────────────────────────────────────────────────


class _NoopCleanupWorker:
    """Drop-in replacement for CleanupWorker that does nothing."""

    async def start(self) -> None:
        pass

    async def stop(self) -> None:
        pass


# ── Service-level fixtures ─────────────────────────────────────────────────


@pytest.fixture()
async def conn():
    connection = await open_connection(":memory:")
    yield connection
    await connection.close()


@pytest.fixture()
def app_db(monkeypatch, conn):
    """Point the module-level connection at the in-memory database."""
    monkeypatch.setattr(db_mod, "_db", conn)
    return conn


@pytest.fixture()
def store(conn) -> SessionStore:
    return SessionStore(conn)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def outbox() -> Outbox:
    return Outbox()


# ── API fixtures ───────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch, tmp_path, outbox):
    """
    Patch the DB path, email transport and cleanup worker so that the app
    lifespan runs cleanly against a temp database.
    """
    monkeypatch.setattr(db_mod, "DB_PATH", str(tmp_path / "test.db"))

    # ── Recording email outbox ────────────────────────────────────────
    monkeypatch.setattr("swagdesk.services.email.send_email", outbox.send_email)
    monkeypatch.setattr("swagdesk.services.email.send_otp_email", outbox.send_code)

    # ── No-op cleanup ─────────────────────────────────────────────────
    monkeypatch.setattr("swagdesk.main.cleanup_worker", _NoopCleanupWorker())

    # ── Disable IP rate limiting in tests ─────────────────────────────
    from swagdesk.rate_limit import limiter as _limiter
    monkeypatch.setattr(_limiter, "enabled", False)

    return outbox


@pytest.fixture()
def client(_test_env) -> TestClient:
    """TestClient with no session; log in with ``login_admin()`` where needed."""
    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc


@pytest.fixture()
def admin_client(client, outbox) -> TestClient:
    """TestClient already holding a valid admin session cookie."""
    login_admin(client, outbox)
    return client
