"""Pydantic models for the swag request API."""

from datetime import datetime
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


RequestStatus = Literal["pending", "approved", "rejected"]


def _text_or_blank(value: Any) -> str:
    # Non-string JSON values count as missing input
    return value if isinstance(value, str) else ""


# ── Swag requests ──────────────────────────────────────────────────────────


class SwagRequestInput(BaseModel):
    """Body of the public swag request form.

    Every field is optional here; presence and format are checked by
    ``swagdesk.services.swag_requests.validate_swag_request`` so that the
    client gets a specific message for the first problem found.
    """
    name: Optional[str] = Field(None, description="Recipient name")
    email: Optional[str] = Field(None, description="Recipient email")
    phone: Optional[str] = Field(None, description="Contact phone number")
    address: Optional[str] = Field(None, description="Full shipping address")
    promo_code: Optional[str] = Field(None, description="Optional promo code")

    @field_validator("name", "email", "phone", "address", "promo_code", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _text_or_blank(value)


class SwagRequest(BaseModel):
    """A stored swag request."""
    id: int = Field(..., description="Request identifier")
    name: str
    email: str
    phone: str
    address: str
    promo_code: Optional[str] = None
    status: RequestStatus = "pending"
    created_at: datetime
    expires_at: datetime


# ── Admin auth ─────────────────────────────────────────────────────────────


class OtpRequest(BaseModel):
    """Request a login code for an admin email address."""
    email: str = Field("", description="Admin email address")

    @field_validator("email", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _text_or_blank(value)


class OtpVerifyRequest(BaseModel):
    """Exchange a login code for a session cookie."""
    email: str = Field("", description="Admin email address")
    otp: str = Field("", description="Six digit code from the email")

    @field_validator("email", "otp", mode="before")
    @classmethod
    def coerce_text(cls, value: Any) -> str:
        return _text_or_blank(value)


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


class AuthStatus(BaseModel):
    authenticated: bool


# ── Analytics ──────────────────────────────────────────────────────────────


class AnalyticsSummary(BaseModel):
    """Request counts by status over unexpired requests."""
    total: int = 0
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    approval_rate: float = Field(0.0, description="Approved share of decided requests, in percent")


class PromoCodeStats(BaseModel):
    code: str
    count: int


class PromoCodeAnalytics(BaseModel):
    top_codes: List[PromoCodeStats] = Field(default_factory=list)
    with_code: int = 0
    without_code: int = 0


# ── Misc ───────────────────────────────────────────────────────────────────


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Service status")
    version: str = Field(..., description="Application version")
    timestamp: datetime = Field(..., description="Current timestamp")
