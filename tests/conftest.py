"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Unit tests
- Integration tests
"""

import threading
from collections.abc import Generator
from typing import Any

import pytest
from flask import Flask
from flask.testing import FlaskClient

from enrollment_intake import create_app
from enrollment_intake.extensions import db


# =============================================================================
# Mail Fixtures
# =============================================================================


class RecordingTransport:
    """Mail transport that keeps messages instead of sending them.

    Messages addressed to a recipient in ``failing`` raise instead.
    """

    def __init__(self, failing: tuple[str, ...] = ()) -> None:
        self.failing = set(failing)
        self.messages: list[Any] = []
        self._lock = threading.Lock()

    def send(self, msg: Any) -> None:
        if msg["To"] in self.failing:
            raise ConnectionRefusedError(f"relay refused {msg['To']}")
        with self._lock:
            self.messages.append(msg)

    @property
    def recipients(self) -> list[str]:
        return [msg["To"] for msg in self.messages]

    def subjects(self) -> list[str]:
        return [msg["Subject"] for msg in self.messages]


@pytest.fixture
def transport() -> RecordingTransport:
    """Provide a recording transport."""
    return RecordingTransport()


# =============================================================================
# Application Fixtures
# =============================================================================


@pytest.fixture
def app(transport: RecordingTransport) -> Generator[Flask, None, None]:
    """Create a testing application over a fresh in-memory database.

    The notifier's transport is swapped for the recording transport.
    """
    app = create_app("testing")
    app.extensions["enrollment_notifier"].transport = transport

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Provide a Flask test client."""
    return app.test_client()


@pytest.fixture
def notifier(app: Flask) -> Any:
    """Provide the application's enrollment notifier."""
    return app.extensions["enrollment_notifier"]


# =============================================================================
# Submission Fixtures
# =============================================================================


@pytest.fixture
def valid_submission() -> dict[str, str]:
    """A complete, valid enrollment submission."""
    return {
        "firstName": "Ann",
        "lastName": "Lee",
        "email": "ANN@X.COM",
        "phone": "123-456-7890",
        "idnumber": "ID12345",
        "dateOfBirth": "2000-01-01",
        "course": "Computer Science",
        "address": "1 Main St",
        "city": "Springfield",
        "zipCode": "00001",
        "emergencyContact": "Bob Lee",
        "emergencyPhone": "111-222-3333",
    }


@pytest.fixture
def make_submission(valid_submission: dict[str, str]) -> Any:
    """Build valid submissions with selected fields overridden."""

    def _make(**overrides: str) -> dict[str, str]:
        data = dict(valid_submission)
        data.update(overrides)
        return data

    return _make
