"""Tests for the public swag request endpoint."""

from tests.mocks.models import VALID_SWAG_PAYLOAD, make_swag_payload


class TestSubmitSwagRequest:
    def test_submit_success(self, client):
        resp = client.post("/api/swag-request", json=VALID_SWAG_PAYLOAD)
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "message": "Swag request submitted successfully",
        }

    def test_submitted_request_is_stored_normalised(self, admin_client):
        admin_client.post(
            "/api/swag-request",
            json=make_swag_payload(name="  Ada Lovelace  ", promo_code="   "),
        )

        requests = admin_client.get("/api/admin/requests").json()
        assert len(requests) == 1
        stored = requests[0]
        assert stored["name"] == "Ada Lovelace"
        assert stored["email"] == "ada.lovelace@gmail.com"
        assert stored["promo_code"] is None
        assert stored["status"] == "pending"

    def test_validation_error(self, client):
        resp = client.post("/api/swag-request", json=make_swag_payload(phone="12345"))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Please provide a valid phone number"}

    def test_missing_field(self, client):
        payload = make_swag_payload()
        del payload["address"]
        resp = client.post("/api/swag-request", json=payload)
        assert resp.status_code == 400
        assert resp.json()["error"] == "Address is required"

    def test_non_string_name(self, client):
        resp = client.post("/api/swag-request", json=make_swag_payload(name=5))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Name is required"}

    def test_null_email(self, client):
        resp = client.post("/api/swag-request", json=make_swag_payload(email=None))
        assert resp.status_code == 400
        assert resp.json() == {"error": "Email is required"}

    def test_non_string_promo_code_is_ignored(self, admin_client):
        resp = admin_client.post(
            "/api/swag-request", json=make_swag_payload(promo_code=2026)
        )
        assert resp.status_code == 200
        stored = admin_client.get("/api/admin/requests").json()[0]
        assert stored["promo_code"] is None

    def test_malformed_body(self, client):
        resp = client.post(
            "/api/swag-request",
            content="not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json() == {"error": "Invalid request body"}

    def test_limit_per_email(self, client):
        for i in range(10):
            resp = client.post("/api/swag-request", json=VALID_SWAG_PAYLOAD)
            assert resp.status_code == 200, f"Request {i + 1} should succeed"

        # Email matching is case-insensitive
        resp = client.post(
            "/api/swag-request",
            json=make_swag_payload(email="ADA.LOVELACE@gmail.com"),
        )
        assert resp.status_code == 400
        assert "maximum limit of 10" in resp.json()["error"]

        resp = client.post(
            "/api/swag-request", json=make_swag_payload(email="grace@gmail.com")
        )
        assert resp.status_code == 200
