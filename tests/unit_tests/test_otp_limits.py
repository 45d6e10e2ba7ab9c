"""Tests for the per-email OTP rate limits."""

from datetime import timedelta

import pytest

from swagdesk.services.otp_limits import MAX_CODES_PER_WINDOW, OtpRateLimiter
from tests.mocks.models import ADMIN_EMAIL, OTHER_ADMIN_EMAIL


@pytest.fixture()
def limiter(store, clock) -> OtpRateLimiter:
    return OtpRateLimiter(store, now=clock)


async def _issue(store, clock, email=ADMIN_EMAIL):
    now = clock()
    await store.add_code(email, "123456", issued_at=now, expires_at=now + timedelta(minutes=10))


class TestIssuance:
    async def test_fresh_address_is_allowed(self, limiter):
        allowance = await limiter.check_issuance_allowed(ADMIN_EMAIL)
        assert allowance.allowed is True
        assert allowance.remaining == MAX_CODES_PER_WINDOW

    async def test_remaining_counts_down(self, limiter, store, clock):
        for _ in range(4):
            await _issue(store, clock)
        allowance = await limiter.check_issuance_allowed(ADMIN_EMAIL)
        assert allowance.allowed is True
        assert allowance.remaining == 1

    async def test_blocked_at_limit(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        allowance = await limiter.check_issuance_allowed(ADMIN_EMAIL)
        assert allowance.allowed is False
        assert allowance.remaining == 0

    async def test_window_slides(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        clock.advance(minutes=61)
        assert (await limiter.check_issuance_allowed(ADMIN_EMAIL)).allowed is True

    async def test_limits_are_per_address(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        assert (await limiter.check_issuance_allowed(OTHER_ADMIN_EMAIL)).allowed is True


class TestVerification:
    async def test_unexpired_codes_do_not_count(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        assert (await limiter.check_verification_allowed(ADMIN_EMAIL)).allowed is True

    async def test_abandoned_codes_block(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        clock.advance(minutes=11)
        assert (await limiter.check_verification_allowed(ADMIN_EMAIL)).allowed is False

    async def test_abandoned_codes_age_out(self, limiter, store, clock):
        for _ in range(5):
            await _issue(store, clock)
        clock.advance(minutes=16)
        assert (await limiter.check_verification_allowed(ADMIN_EMAIL)).allowed is True

    async def test_four_abandoned_codes_still_allowed(self, limiter, store, clock):
        for _ in range(4):
            await _issue(store, clock)
        clock.advance(minutes=11)
        assert (await limiter.check_verification_allowed(ADMIN_EMAIL)).allowed is True
