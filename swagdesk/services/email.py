"""
Email service: sends login codes and approval notices.

Delivery goes through the Resend HTTP API or plain SMTP, whichever is
configured (see ``config.email_backend``). In development, with neither
configured, emails are logged to the console so you can see what *would*
be sent without a mail provider.

``send_email`` never raises: callers get False and the failure is logged.
"""

from __future__ import annotations

import html
import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

import aiosmtplib
import httpx

from swagdesk import config
from swagdesk.models import SwagRequest

logger = logging.getLogger(__name__)

_BRAND_COLOR = "#F6821F"


def _sender() -> str:
    return f"{config.FROM_NAME} <{config.FROM_EMAIL}>" if config.FROM_NAME else config.FROM_EMAIL


# ── Transports ─────────────────────────────────────────────────────────────


async def _send_via_resend(to_email: str, subject: str, html_body: str) -> bool:
    async with httpx.AsyncClient(timeout=15.0) as client:
        resp = await client.post(
            config.RESEND_API_URL,
            headers={"Authorization": f"Bearer {config.RESEND_API_KEY}"},
            json={
                "from": _sender(),
                "to": [to_email],
                "subject": subject,
                "html": html_body,
            },
        )
    if not resp.is_success:
        logger.error(
            "Resend rejected email to %s: HTTP %d %s",
            to_email, resp.status_code, resp.text[:200],
        )
        return False
    return True


async def _send_via_smtp(to_email: str, subject: str, html_body: str) -> bool:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = _sender()
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html"))

    await aiosmtplib.send(
        msg,
        hostname=config.SMTP_HOST,
        port=config.SMTP_PORT,
        username=config.SMTP_USERNAME,
        password=config.SMTP_PASSWORD,
        start_tls=config.SMTP_USE_TLS,
    )
    return True


async def send_email(to_email: str, subject: str, html_body: str) -> bool:
    """
    Send (or log) one HTML email.

    Returns True when the provider accepted the message.
    """
    backend = config.email_backend()

    # ── Console fallback (dev mode) ───────────────────────────────────
    if backend == "console":
        logger.info(
            "📧 [DEV] Would send email to %s:\n  Subject: %s\n%s",
            to_email, subject, html_body,
        )
        return True

    try:
        if backend == "resend":
            sent = await _send_via_resend(to_email, subject, html_body)
        else:
            sent = await _send_via_smtp(to_email, subject, html_body)
    except Exception:
        logger.exception("Failed to send email to %s", to_email)
        return False

    if sent:
        logger.info("Email sent to %s via %s", to_email, backend)
    return sent


# ── Messages ───────────────────────────────────────────────────────────────


def build_otp_email(code: str) -> tuple[str, str]:
    """Subject and HTML body of the admin login code email."""
    subject = "Your Cloudflare Swag Admin Login OTP"
    body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: {_BRAND_COLOR};">Cloudflare Swag Admin</h2>
      <p>Your one-time password (OTP) for admin login is:</p>
      <div style="background-color: #f5f5f5; padding: 20px; text-align: center; border-radius: 8px; margin: 20px 0;">
        <span style="font-size: 32px; font-weight: bold; letter-spacing: 8px; color: #404040;">{code}</span>
      </div>
      <p style="color: #666;">This OTP will expire in 10 minutes.</p>
      <p style="color: #666;">If you didn't request this OTP, please ignore this email.</p>
    </div>
    """
    return subject, body


def build_approval_email(request: SwagRequest) -> tuple[str, str]:
    """Subject and HTML body telling a requester their swag is on its way."""
    safe_name = html.escape(request.name)
    safe_address = html.escape(request.address)
    subject = "Your Cloudflare Swag Request Has Been Approved!"
    body = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
      <h2 style="color: {_BRAND_COLOR};">Great News, {safe_name}!</h2>
      <p>Your Cloudflare swag request has been approved!</p>
      <div style="background-color: #f5f5f5; padding: 20px; border-radius: 8px; margin: 20px 0;">
        <p><strong>Shipping Address:</strong></p>
        <p style="color: #666;">{safe_address}</p>
      </div>
      <p>Your swag will be shipped to the address above. You can expect to receive it within 2-4 weeks.</p>
      <p style="color: #666; margin-top: 30px;">Thank you for being part of the Cloudflare community!</p>
    </div>
    """
    return subject, body


async def send_otp_email(to_email: str, code: str) -> bool:
    subject, body = build_otp_email(code)
    return await send_email(to_email, subject, body)


async def send_approval_email(request: SwagRequest) -> bool:
    subject, body = build_approval_email(request)
    return await send_email(request.email, subject, body)
