"""
Error kinds raised by the services.

Each kind carries the HTTP status the API answers with and the message
shown to the client. Routers never build these responses themselves; the
handler registered in ``swagdesk.main`` does it for every subclass of
``ApiError``.
"""

from __future__ import annotations


class ApiError(Exception):
    status_code: int = 400
    message: str = "Request failed"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Swag requests ─────────────────────────────────────────────────────────


class InvalidSwagRequest(ApiError):
    status_code = 400


class RequestNotFound(ApiError):
    status_code = 404
    message = "Request not found"


# ── Admin auth ────────────────────────────────────────────────────────────


class AdminAuthError(ApiError):
    pass


class Unauthorized(AdminAuthError):
    status_code = 401
    message = "Unauthorized"


class InvalidEmail(AdminAuthError):
    status_code = 400
    message = "Please provide a valid email address"


class DomainNotAllowed(AdminAuthError):
    status_code = 403

    def __init__(self, domain: str) -> None:
        super().__init__(f"Only @{domain} email addresses are allowed")
        self.domain = domain


class RateLimited(AdminAuthError):
    status_code = 429

    def __init__(self, message: str, retry_after: int) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class MissingFields(AdminAuthError):
    status_code = 400
    message = "Email and OTP are required"


class InvalidCodeFormat(AdminAuthError):
    status_code = 400
    message = "Invalid OTP format"


class InvalidOrExpiredCode(AdminAuthError):
    """Wrong, expired and already-used codes all end up here."""

    status_code = 401
    message = "Invalid or expired OTP"


class StoreUnavailable(AdminAuthError):
    status_code = 500
    message = "Authentication store unavailable. Please try again."
