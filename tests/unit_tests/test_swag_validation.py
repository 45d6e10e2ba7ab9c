"""Tests for swag request form validation and CSV export."""

from datetime import datetime, timezone

import pytest

from swagdesk.models import SwagRequest, SwagRequestInput
from swagdesk.services.swag_requests import (
    export_csv,
    export_filename,
    is_valid_name,
    is_valid_phone,
    validate_swag_request,
)
from tests.mocks.models import make_swag_payload


def _validate(**overrides):
    return validate_swag_request(SwagRequestInput(**make_swag_payload(**overrides)))


class TestValidation:
    def test_valid_payload(self):
        assert _validate() is None

    def test_promo_code_is_optional(self):
        assert _validate(promo_code=None) is None
        assert _validate(promo_code="") is None
        assert _validate(promo_code="   ") is None

    def test_unicode_names_allowed(self):
        assert _validate(name="José O'Brien-Núñez Jr.") is None
        assert _validate(name="Søren Kierkegaard") is None

    @pytest.mark.parametrize(
        "overrides, message",
        [
            ({"name": None}, "Name is required"),
            ({"name": "   "}, "Name is required"),
            ({"name": "A"}, "Name must be at least 2 characters"),
            ({"name": "A" * 101}, "Name must be less than 100 characters"),
            ({"name": "R2-D2"}, "Name contains invalid characters"),
            ({"email": None}, "Email is required"),
            ({"email": "nope"}, "Please provide a valid email address"),
            ({"email": "a" * 250 + "@gmail.com"}, "Email must be less than 254 characters"),
            ({"phone": ""}, "Phone number is required"),
            ({"phone": "1" * 31}, "Phone number must be less than 30 characters"),
            ({"phone": "call me maybe"}, "Please provide a valid phone number"),
            ({"phone": "12345"}, "Please provide a valid phone number"),
            ({"address": None}, "Address is required"),
            ({"address": "Short St"}, "Please provide a complete shipping address"),
            ({"address": "x" * 501}, "Address must be less than 500 characters"),
            ({"address": "!!!!!!!!!!!!"}, "Please provide a complete shipping address"),
            ({"promo_code": "P" * 51}, "Promo code must be less than 50 characters"),
            (
                {"promo_code": "SAVE 10%"},
                "Promo code can only contain letters, numbers, hyphens and underscores",
            ),
        ],
    )
    def test_first_problem_is_reported(self, overrides, message):
        assert _validate(**overrides) == message


class TestName:
    @pytest.mark.parametrize("name", ["Zoë Saldaña", "李小龍", "Mary-Jane O'Neil", "Dr. Who"])
    def test_accepts_letters_from_any_script(self, name):
        assert is_valid_name(name)

    @pytest.mark.parametrize("name", ["Jo²", "Louis Ⅻ", "Ada_Lovelace", "Ada 2", "Ada!"])
    def test_rejects_digits_numerals_and_symbols(self, name):
        assert not is_valid_name(name)

    def test_superscript_digit_is_reported(self):
        assert _validate(name="Jo²") == "Name contains invalid characters"


class TestPhone:
    @pytest.mark.parametrize(
        "phone", ["+1 (415) 555-0100", "020 7946 0958", "+370.600.00000", "4155550100"]
    )
    def test_accepts_common_formats(self, phone):
        assert is_valid_phone(phone)

    @pytest.mark.parametrize(
        "phone", ["555-01", "+1 415 555 0100 ext 5", "1234567890123456", "++14155550100"]
    )
    def test_rejects_bad_numbers(self, phone):
        assert not is_valid_phone(phone)


class TestCsv:
    def test_export_quotes_every_value(self):
        created = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)
        rows = [
            SwagRequest(
                id=1,
                name='Bobby "Tables" Smith',
                email="bobby@gmail.com",
                phone="+1 415 555 0100",
                address="1 Main St, Springfield",
                status="approved",
                created_at=created,
                expires_at=created,
            )
        ]
        lines = export_csv(rows).splitlines()
        assert lines[0] == "Name,Email,Phone,Address,Created At"
        assert lines[1] == (
            '"Bobby ""Tables"" Smith","bobby@gmail.com","+1 415 555 0100",'
            f'"1 Main St, Springfield","{created.isoformat()}"'
        )

    def test_export_with_no_rows_is_header_only(self):
        assert export_csv([]) == "Name,Email,Phone,Address,Created At\n"

    def test_filename_uses_date(self):
        now = datetime(2026, 3, 2, 23, 59, tzinfo=timezone.utc)
        assert export_filename(now) == "approved-requests-2026-03-02.csv"
