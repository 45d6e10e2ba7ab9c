"""
Per-IP request throttling using slowapi.

This sits in front of the per-email OTP limits in
``swagdesk.services.otp_limits`` and catches clients hammering the
public endpoints with many different addresses.

Tiers:
  • strict  – 5/min  (OTP send – prevents email spam)
  • auth    – 10/min (OTP verify – slows brute force)
  • submit  – 10/min (public swag request form)
  • default – 60/min (everything else)

The limiter keys on client IP.
"""

from slowapi import Limiter
from slowapi.util import get_remote_address

limiter = Limiter(key_func=get_remote_address, default_limits=["60/minute"])

# Named rate strings for use in @limiter.limit() decorators
STRICT = "5/minute"
AUTH = "10/minute"
SUBMIT = "10/minute"
DEFAULT = "60/minute"
