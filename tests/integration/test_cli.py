"""Integration tests for the Flask CLI commands."""

import pandas as pd
import pytest

from enrollment_intake.extensions import db
from enrollment_intake.models import StudentEnrollment


@pytest.fixture
def runner(app):
    return app.test_cli_runner()


@pytest.fixture
def submitted(client, valid_submission, make_submission) -> list[str]:
    """Two stored applications; returns their ids."""
    ids = [client.post("/send", json=valid_submission).get_json()["data"]["studentId"]]
    other = make_submission(
        firstName="Raj", lastName="Patel", email="raj@school.org", idnumber="ID77777", course="Medicine"
    )
    ids.append(client.post("/send", json=other).get_json()["data"]["studentId"])
    return ids


class TestSetEnrollmentStatus:
    """Tests for `flask set-enrollment-status`."""

    def test_approve(self, runner, submitted) -> None:
        result = runner.invoke(args=["set-enrollment-status", submitted[0], "approved"])

        assert result.exit_code == 0
        assert "marked approved" in result.output
        db.session.expire_all()
        assert db.session.get(StudentEnrollment, submitted[0]).status == "approved"

    def test_decided_application_cannot_change(self, runner, submitted) -> None:
        runner.invoke(args=["set-enrollment-status", submitted[0], "rejected"])

        result = runner.invoke(args=["set-enrollment-status", submitted[0], "approved"])

        assert result.exit_code != 0
        assert "Cannot change status from 'rejected' to 'approved'" in result.output

    def test_unknown_application(self, runner) -> None:
        result = runner.invoke(
            args=["set-enrollment-status", "00000000-0000-4000-8000-000000000000", "approved"]
        )

        assert result.exit_code != 0
        assert "Student not found" in result.output

    def test_status_must_be_a_decision(self, runner, submitted) -> None:
        result = runner.invoke(args=["set-enrollment-status", submitted[0], "pending"])

        assert result.exit_code != 0


class TestExportEnrollments:
    """Tests for `flask export-enrollments`."""

    def test_exports_all(self, runner, submitted, tmp_path) -> None:
        output = tmp_path / "enrollments.csv"

        result = runner.invoke(args=["export-enrollments", "--output", str(output)])

        assert result.exit_code == 0
        assert "Exported 2 applications" in result.output
        frame = pd.read_csv(output, dtype=str)
        assert set(frame["Email"]) == {"ann@x.com", "raj@school.org"}
        assert "ID Number" not in frame.columns

    def test_exports_filtered(self, runner, submitted, tmp_path) -> None:
        output = tmp_path / "medicine.csv"

        runner.invoke(args=["export-enrollments", "-o", str(output), "--course", "Medicine"])

        frame = pd.read_csv(output, dtype=str)
        assert list(frame["Last Name"]) == ["Patel"]
        assert list(frame["ZIP Code"]) == ["00001"]


def test_init_db(runner) -> None:
    result = runner.invoke(args=["init-db"])

    assert result.exit_code == 0
    assert "Database tables created." in result.output
