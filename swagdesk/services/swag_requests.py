"""
Swag request intake and the admin actions on submitted requests.
"""

from __future__ import annotations

import csv
import io
import logging
import re
from datetime import datetime, timedelta

from swagdesk import db
from swagdesk.config import MAX_REQUESTS_PER_EMAIL, REQUEST_RETENTION_DAYS
from swagdesk.errors import InvalidSwagRequest, RequestNotFound
from swagdesk.models import SwagRequest, SwagRequestInput
from swagdesk.services import email as email_service
from swagdesk.services.admin_auth import is_valid_email

logger = logging.getLogger(__name__)

# Input length limits
MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MAX_EMAIL_LENGTH = 254
MIN_PHONE_LENGTH = 7
MAX_PHONE_LENGTH = 30
MIN_ADDRESS_LENGTH = 10
MAX_ADDRESS_LENGTH = 500
MAX_PROMO_CODE_LENGTH = 50

_NAME_PUNCTUATION = "-'."
_PHONE_CHARS_RE = re.compile(r"[\d\s+\-().]+")
_PHONE_FORMATTING_RE = re.compile(r"[\s\-().]")
_PHONE_DIGITS_RE = re.compile(r"\+?\d{7,15}")
_ALNUM_RE = re.compile(r"[a-zA-Z0-9]")
_PROMO_CODE_RE = re.compile(r"[a-zA-Z0-9_-]+")

CSV_HEADER = ["Name", "Email", "Phone", "Address", "Created At"]


# ── Validation ─────────────────────────────────────────────────────────────


def is_valid_name(name: str) -> bool:
    """Letters from any script, plus whitespace, hyphens, apostrophes and periods."""
    return all(ch.isalpha() or ch.isspace() or ch in _NAME_PUNCTUATION for ch in name)


def is_valid_phone(phone: str) -> bool:
    """Loose international format: 7–15 digits with common punctuation."""
    if not MIN_PHONE_LENGTH <= len(phone) <= MAX_PHONE_LENGTH:
        return False
    if not _PHONE_CHARS_RE.fullmatch(phone):
        return False
    return bool(_PHONE_DIGITS_RE.fullmatch(_PHONE_FORMATTING_RE.sub("", phone)))


def validate_swag_request(data: SwagRequestInput) -> str | None:
    """Return the message for the first invalid field, or None if all is well."""
    name = (data.name or "").strip()
    if not name:
        return "Name is required"
    if len(name) < MIN_NAME_LENGTH:
        return f"Name must be at least {MIN_NAME_LENGTH} characters"
    if len(name) > MAX_NAME_LENGTH:
        return f"Name must be less than {MAX_NAME_LENGTH} characters"
    if not is_valid_name(name):
        return "Name contains invalid characters"

    email = (data.email or "").strip().lower()
    if not email:
        return "Email is required"
    if len(email) > MAX_EMAIL_LENGTH:
        return f"Email must be less than {MAX_EMAIL_LENGTH} characters"
    if not is_valid_email(email):
        return "Please provide a valid email address"

    phone = (data.phone or "").strip()
    if not phone:
        return "Phone number is required"
    if len(phone) > MAX_PHONE_LENGTH:
        return f"Phone number must be less than {MAX_PHONE_LENGTH} characters"
    if not is_valid_phone(phone):
        return "Please provide a valid phone number"

    address = (data.address or "").strip()
    if not address:
        return "Address is required"
    if len(address) < MIN_ADDRESS_LENGTH:
        return "Please provide a complete shipping address"
    if len(address) > MAX_ADDRESS_LENGTH:
        return f"Address must be less than {MAX_ADDRESS_LENGTH} characters"
    if not _ALNUM_RE.search(address):
        return "Please provide a complete shipping address"

    promo_code = (data.promo_code or "").strip()
    if promo_code:
        if len(promo_code) > MAX_PROMO_CODE_LENGTH:
            return f"Promo code must be less than {MAX_PROMO_CODE_LENGTH} characters"
        if not _PROMO_CODE_RE.fullmatch(promo_code):
            return "Promo code can only contain letters, numbers, hyphens and underscores"

    return None


# ── Operations ─────────────────────────────────────────────────────────────


async def submit_swag_request(data: SwagRequestInput, *, now: datetime) -> SwagRequest:
    error = validate_swag_request(data)
    if error is not None:
        raise InvalidSwagRequest(error)

    email = data.email.strip().lower()  # type: ignore[union-attr]
    if await db.count_requests_for_email(email) >= MAX_REQUESTS_PER_EMAIL:
        raise InvalidSwagRequest(
            f"You have reached the maximum limit of {MAX_REQUESTS_PER_EMAIL} swag "
            "requests. Please wait for your existing requests to expire or be processed."
        )

    request = await db.create_swag_request(
        data.name.strip(),  # type: ignore[union-attr]
        email,
        data.phone.strip(),  # type: ignore[union-attr]
        data.address.strip(),  # type: ignore[union-attr]
        (data.promo_code or "").strip() or None,
        now=now,
        retention=timedelta(days=REQUEST_RETENTION_DAYS),
    )
    logger.info("Swag request %d submitted by %s", request.id, email)
    return request


async def approve_swag_request(request_id: int) -> SwagRequest:
    """Mark a request approved and tell the requester. Email failure is not fatal."""
    request = await db.get_swag_request(request_id)
    if request is None:
        raise RequestNotFound()

    await db.set_request_status(request_id, "approved")
    request = request.model_copy(update={"status": "approved"})

    if not await email_service.send_approval_email(request):
        logger.error("Failed to send approval email for request %d", request_id)
    logger.info("Swag request %d approved", request_id)
    return request


async def delete_swag_request(request_id: int) -> None:
    if not await db.delete_swag_request(request_id):
        raise RequestNotFound()
    logger.info("Swag request %d deleted", request_id)


def export_csv(requests: list[SwagRequest]) -> str:
    """Render approved requests as CSV; the header is bare, every value is quoted."""
    buf = io.StringIO()
    buf.write(",".join(CSV_HEADER) + "\n")
    writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for r in requests:
        writer.writerow([r.name, r.email, r.phone, r.address, r.created_at.isoformat()])
    return buf.getvalue()


def export_filename(now: datetime) -> str:
    return f"approved-requests-{now.date().isoformat()}.csv"
