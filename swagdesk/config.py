"""
Application configuration from environment variables.

All settings have sensible defaults for local development.
A .env file in the project root is loaded automatically (if present).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file before reading any env vars
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

# ── Environment ───────────────────────────────────────────────────────────

VERSION = "0.1.0"

LOG_LEVEL: str = os.getenv("LOG_LEVEL", "info")

# ── Paths ─────────────────────────────────────────────────────────────────

PROJECT_ROOT = Path(__file__).resolve().parent.parent
DATA_DIR = PROJECT_ROOT / "data"

# SQLite database file
DB_PATH: str = os.getenv("DB_PATH", str(DATA_DIR / "swagdesk.db"))

# ── Admin access ──────────────────────────────────────────────────────────

# Only addresses in this domain may request an admin login code.
ADMIN_EMAIL_DOMAIN: str = os.getenv("ADMIN_EMAIL_DOMAIN", "cloudflare.com").lower()

# ── Swag requests ─────────────────────────────────────────────────────────

REQUEST_RETENTION_DAYS: int = int(os.getenv("REQUEST_RETENTION_DAYS", "30"))
MAX_REQUESTS_PER_EMAIL: int = int(os.getenv("MAX_REQUESTS_PER_EMAIL", "10"))

# How often expired requests and admin sessions are purged (seconds).
CLEANUP_INTERVAL: float = float(os.getenv("CLEANUP_INTERVAL", "3600"))

# ── CORS ──────────────────────────────────────────────────────────────────

ALLOWED_ORIGINS: list[str] = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

# ── Email ─────────────────────────────────────────────────────────────────

FROM_EMAIL: str = os.getenv("FROM_EMAIL", "noreply@swagdesk.local")
FROM_NAME: str = os.getenv("FROM_NAME", "Cloudflare Swag")

RESEND_API_KEY: str = os.getenv("RESEND_API_KEY", "")
RESEND_API_URL: str = os.getenv("RESEND_API_URL", "https://api.resend.com/emails")

SMTP_HOST: str = os.getenv("SMTP_HOST", "")
SMTP_PORT: int = int(os.getenv("SMTP_PORT", "587"))
SMTP_USERNAME: str = os.getenv("SMTP_USERNAME", "")
SMTP_PASSWORD: str = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS: bool = os.getenv("SMTP_USE_TLS", "true").lower() == "true"

# "auto", "resend", "smtp" or "console".
_EMAIL_BACKEND_OVERRIDE: str = os.getenv("EMAIL_BACKEND", "auto")


def email_backend() -> str:
    """Name of the transport that actually delivers email.

    Controlled by EMAIL_BACKEND env var:
      • "auto" (default): Resend if an API key is set, else SMTP if
        credentials are configured, else console
      • "resend" / "smtp": always use that transport
      • "console": never send, log instead
    """
    override = _EMAIL_BACKEND_OVERRIDE.lower()
    if override in ("resend", "smtp", "console"):
        return override
    if RESEND_API_KEY:
        return "resend"
    if SMTP_HOST and SMTP_USERNAME and SMTP_PASSWORD:
        return "smtp"
    return "console"
