"""
Admin authentication endpoints – email OTP flow with opaque session cookies.
"""

from typing import Annotated

from fastapi import APIRouter, Cookie, Request, Response

from swagdesk.dependencies import (
    AdminSession,
    AuthService,
    clear_session_cookie,
    set_session_cookie,
)
from swagdesk.models import AuthStatus, OtpRequest, OtpVerifyRequest, SuccessResponse
from swagdesk.rate_limit import AUTH, STRICT, limiter

router = APIRouter(prefix="/api/admin", tags=["admin-auth"])


@router.post(
    "/send-otp",
    response_model=SuccessResponse,
    operation_id="sendOtp",
    summary="Email a one-time login code to an admin address",
)
@limiter.limit(STRICT)
async def send_otp(request: Request, body: OtpRequest, auth: AuthService) -> SuccessResponse:
    """
    Generate a 6-digit code, store it, and email it. Succeeds even when the
    email could not be delivered; the code is already stored by then.
    """
    await auth.issue_otp(body.email)
    return SuccessResponse(message="OTP sent successfully")


@router.post(
    "/verify-otp",
    response_model=SuccessResponse,
    operation_id="verifyOtp",
    summary="Verify a login code and receive a session cookie",
)
@limiter.limit(AUTH)
async def verify_otp(
    request: Request,
    body: OtpVerifyRequest,
    response: Response,
    auth: AuthService,
) -> SuccessResponse:
    session = await auth.verify_otp(body.email, body.otp)
    set_session_cookie(request, response, session.token, session.cookie_max_age_seconds)
    return SuccessResponse(message="Login successful")


@router.get(
    "/check-auth",
    response_model=AuthStatus,
    operation_id="checkAuth",
    summary="Check whether the session cookie is still valid",
)
async def check_auth(_: AdminSession) -> AuthStatus:
    return AuthStatus(authenticated=True)


@router.post(
    "/logout",
    response_model=SuccessResponse,
    operation_id="logout",
    summary="End the admin session and clear the cookie",
)
async def logout(
    request: Request,
    response: Response,
    auth: AuthService,
    admin_session: Annotated[str | None, Cookie()] = None,
) -> SuccessResponse:
    await auth.logout(admin_session)
    clear_session_cookie(request, response)
    return SuccessResponse()
