import logging
from typing import Annotated

from fastapi import Cookie, Depends, Request, Response

from swagdesk import db
from swagdesk.errors import Unauthorized
from swagdesk.services import email as email_service
from swagdesk.services.admin_auth import AdminAuthService
from swagdesk.services.session_store import SessionStore

logger = logging.getLogger(__name__)

SESSION_COOKIE = "admin_session"


# ── Services ───────────────────────────────────────────────────────────────


def get_auth_service() -> AdminAuthService:
    return AdminAuthService(
        SessionStore(db.get_db()),
        send_code=email_service.send_otp_email,
    )


AuthService = Annotated[AdminAuthService, Depends(get_auth_service)]


# ── Session cookie ─────────────────────────────────────────────────────────


def _is_secure(request: Request) -> bool:
    return (
        request.url.scheme == "https"
        or request.headers.get("x-forwarded-proto") == "https"
    )


def set_session_cookie(request: Request, response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        path="/",
        httponly=True,
        samesite="strict",
        secure=_is_secure(request),
        max_age=max_age,
    )


def clear_session_cookie(request: Request, response: Response) -> None:
    set_session_cookie(request, response, "", 0)


async def require_admin(
    auth: AuthService,
    admin_session: Annotated[str | None, Cookie()] = None,
) -> str:
    """Return the caller's session token, or reject with 401."""
    if not await auth.is_authenticated(admin_session):
        raise Unauthorized()
    return admin_session  # type: ignore[return-value]


AdminSession = Annotated[str, Depends(require_admin)]
