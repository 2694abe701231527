"""Integration tests for the index, health and fallback responses."""

from unittest.mock import patch


class TestIndex:
    def test_lists_endpoints(self, client) -> None:
        response = client.get("/")

        body = response.get_json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["version"] == "2.0.0"
        assert "POST /send" in body["endpoints"]


class TestHealth:
    """Tests for GET /health."""

    def test_healthy(self, client) -> None:
        response = client.get("/health")

        body = response.get_json()
        assert response.status_code == 200
        assert body["status"] == "OK"
        assert body["database"] == "Connected"
        assert body["environment"] == "testing"
        assert body["uptime"] >= 0

    def test_database_unreachable(self, client) -> None:
        """An unreachable database reports 503."""
        with patch(
            "enrollment_intake.check_database_health",
            return_value=(False, "Database connection failed: refused"),
        ):
            response = client.get("/health")

        assert response.status_code == 503
        assert response.get_json()["database"] == "Disconnected"


class TestFallbacks:
    """Tests for unknown routes and unexpected errors."""

    def test_unknown_route(self, client) -> None:
        response = client.get("/nope")

        assert response.status_code == 404
        assert response.get_json() == {
            "success": False,
            "message": "API endpoint '/nope' not found",
            "availableEndpoints": ["/send", "/api/route", "/api/students", "/health"],
        }

    def test_unexpected_error_hides_details(self, client, valid_submission) -> None:
        """Unexpected failures return a generic 500."""
        with patch(
            "enrollment_intake.services.intake_pipeline.IntakePipeline.submit",
            side_effect=RuntimeError("boom"),
        ):
            response = client.post("/send", json=valid_submission)

        assert response.status_code == 500
        assert response.get_json() == {
            "success": False,
            "message": "Internal server error. Please try again later.",
            "code": "INTERNAL_ERROR",
        }
