"""Integration tests for the submission endpoints."""

import pytest

from enrollment_intake import create_app
from enrollment_intake.config import TestingConfig, config_by_name
from enrollment_intake.extensions import db
from enrollment_intake.models import StudentEnrollment


class RateLimitedConfig(TestingConfig):
    RATELIMIT_ENABLED = True


class ProxiedConfig(RateLimitedConfig):
    TRUSTED_PROXY_COUNT = 1


class TestSubmitEnrollment:
    """Tests for POST /send and POST /api/route."""

    def test_accepts_valid_submission(self, client, transport, valid_submission) -> None:
        """A valid application is stored and confirmed."""
        response = client.post("/send", json=valid_submission)

        assert response.status_code == 201
        body = response.get_json()
        assert body["success"] is True
        assert body["data"]["email"] == "ann@x.com"
        assert body["data"]["status"] == "pending"
        assert body["data"]["course"] == "Computer Science"

        stored = StudentEnrollment.query.one()
        assert stored.id == body["data"]["studentId"]
        assert stored.email == "ann@x.com"
        assert stored.status == "pending"
        assert len(transport.messages) == 2

    def test_repeat_submission_conflicts_on_email(self, client, valid_submission) -> None:
        """Submitting the same application twice is rejected citing email."""
        client.post("/send", json=valid_submission)

        response = client.post("/send", json=valid_submission)

        assert response.status_code == 409
        assert response.get_json() == {
            "success": False,
            "message": "A student with this email already exists",
            "code": "DUPLICATE_ENTRY",
            "field": "email",
        }
        assert StudentEnrollment.query.count() == 1

    def test_validation_errors(self, client, make_submission) -> None:
        """Invalid input returns every error and stores nothing."""
        response = client.post("/send", json=make_submission(email="not-an-email", course=""))

        assert response.status_code == 400
        assert response.get_json() == {
            "success": False,
            "message": "Validation failed",
            "errors": ["Please provide a valid email address", "course is required"],
        }
        assert StudentEnrollment.query.count() == 0

    def test_alternative_route(self, client, valid_submission) -> None:
        """/api/route behaves like /send."""
        response = client.post("/api/route", json=valid_submission)

        assert response.status_code == 201

    def test_form_encoded_submission(self, client, valid_submission) -> None:
        """Form-encoded bodies are accepted as well as JSON."""
        response = client.post("/send", data=valid_submission)

        assert response.status_code == 201

    def test_records_client_details(self, client, valid_submission) -> None:
        """The socket address and user agent are stored; X-Forwarded-For is not trusted."""
        client.post(
            "/send",
            json=valid_submission,
            headers={"X-Forwarded-For": "198.51.100.4", "User-Agent": "EnrollForm/1.0"},
            environ_overrides={"REMOTE_ADDR": "203.0.113.20"},
        )

        stored = StudentEnrollment.query.one()
        assert stored.ip_address == "203.0.113.20"
        assert stored.user_agent == "EnrollForm/1.0"

    def test_email_failure_does_not_fail_request(self, client, transport, valid_submission) -> None:
        """Delivery problems after storage still return success."""
        transport.failing.update({"ann@x.com", "registrar@eduplatform.org"})

        response = client.post("/send", json=valid_submission)

        assert response.status_code == 201
        assert StudentEnrollment.query.count() == 1

    def test_get_not_allowed(self, client) -> None:
        response = client.get("/send")

        assert response.status_code == 405
        assert response.get_json()["success"] is False


class TestTestEmail:
    """Tests for POST /test-email."""

    def test_sends_to_requested_address(self, client, transport) -> None:
        response = client.post("/test-email", json={"email": "ops@school.org"})

        assert response.status_code == 200
        assert transport.recipients == ["ops@school.org"]

    def test_defaults_to_admin_recipient(self, client, transport) -> None:
        response = client.post("/test-email")

        assert response.status_code == 200
        assert transport.recipients == ["registrar@eduplatform.org"]

    def test_reports_delivery_failure(self, client, transport) -> None:
        transport.failing.add("ops@school.org")

        response = client.post("/test-email", json={"email": "ops@school.org"})

        assert response.status_code == 500
        assert response.get_json()["message"] == "Failed to send test email"

    def test_forbidden_in_production(self, app, client) -> None:
        """The endpoint is disabled in production."""
        app.config["ENVIRONMENT"] = "production"

        response = client.post("/test-email", json={"email": "ops@school.org"})

        assert response.status_code == 403


class TestRateLimiting:
    """Tests for the per-client submission limit."""

    @pytest.fixture
    def limited_client(self, monkeypatch, transport):
        """Client for an application created with rate limiting switched on."""
        monkeypatch.setitem(config_by_name, "rate-limited", RateLimitedConfig)

        app = create_app("rate-limited")
        app.extensions["enrollment_notifier"].transport = transport

        with app.app_context():
            yield app.test_client()
            db.session.remove()
            db.drop_all()

    def test_sixth_submission_is_limited(self, limited_client, make_submission) -> None:
        """Five submissions per window are allowed; the sixth gets 429."""
        for n in range(5):
            response = limited_client.post("/send", json=make_submission(email="bad"))
            assert response.status_code == 400, n

        response = limited_client.post("/send", json=make_submission(email="bad"))

        assert response.status_code == 429
        assert response.get_json() == {
            "success": False,
            "message": "Too many enrollment attempts. Please try again in 15 minutes.",
        }

    def test_limit_is_shared_between_routes(self, limited_client, make_submission) -> None:
        """Both submission routes draw from one allowance."""
        for _ in range(3):
            limited_client.post("/send", json=make_submission(email="bad"))
        for _ in range(2):
            limited_client.post("/api/route", json=make_submission(email="bad"))

        response = limited_client.post("/api/route", json=make_submission(email="bad"))

        assert response.status_code == 429

    def test_limit_is_per_client(self, limited_client, make_submission) -> None:
        """Another client address has its own allowance."""
        for _ in range(5):
            limited_client.post("/send", json=make_submission(email="bad"))

        response = limited_client.post(
            "/send", json=make_submission(email="bad"), environ_overrides={"REMOTE_ADDR": "198.51.100.9"}
        )

        assert response.status_code == 400

    def test_forwarded_header_does_not_reset_limit(self, limited_client, make_submission) -> None:
        """Rotating X-Forwarded-For values share the socket address's allowance."""
        statuses = [
            limited_client.post(
                "/send", json=make_submission(email="bad"), headers={"X-Forwarded-For": f"10.9.9.{n}"}
            ).status_code
            for n in range(6)
        ]

        assert statuses == [400] * 5 + [429]


class TestTrustedProxy:
    """Tests for client addresses behind a configured reverse proxy."""

    @pytest.fixture
    def proxied_client(self, monkeypatch, transport):
        """Client for a rate-limited application behind one trusted proxy."""
        monkeypatch.setitem(config_by_name, "proxied", ProxiedConfig)

        app = create_app("proxied")
        app.extensions["enrollment_notifier"].transport = transport

        with app.app_context():
            yield app.test_client()
            db.session.remove()
            db.drop_all()

    def test_records_proxy_appended_hop(self, proxied_client, valid_submission) -> None:
        """Only the hop appended by the trusted proxy is used."""
        proxied_client.post(
            "/send",
            json=valid_submission,
            headers={"X-Forwarded-For": "10.9.9.9, 198.51.100.4"},
        )

        assert StudentEnrollment.query.one().ip_address == "198.51.100.4"

    def test_spoofed_leading_hops_share_a_limit(self, proxied_client, make_submission) -> None:
        """Client-supplied hops before the proxy's entry do not create new allowances."""
        statuses = [
            proxied_client.post(
                "/send",
                json=make_submission(email="bad"),
                headers={"X-Forwarded-For": f"10.9.9.{n}, 198.51.100.4"},
            ).status_code
            for n in range(6)
        ]

        assert statuses == [400] * 5 + [429]
