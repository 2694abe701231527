# services/intake_pipeline.py
"""
Enrollment intake pipeline.

A submission moves strictly forward through

    received -> validated -> duplicate_checked -> persisted -> notified -> completed

and stops early at validation_failed, duplicate_found or failed. Nothing is
retried: each step completes or the submission ends in one terminal state.
"""

import logging

from enrollment_intake.controllers.enrollment.forms import validate_submission
from enrollment_intake.errors import ConflictError, StorageError, ValidationError
from enrollment_intake.services.enrollment_service import EnrollmentService


class IntakeState:
    """Pipeline states."""
    RECEIVED = 'received'
    VALIDATED = 'validated'
    DUPLICATE_CHECKED = 'duplicate_checked'
    PERSISTED = 'persisted'
    NOTIFIED = 'notified'
    COMPLETED = 'completed'

    # Terminal early exits
    VALIDATION_FAILED = 'validation_failed'
    DUPLICATE_FOUND = 'duplicate_found'
    FAILED = 'failed'

    TERMINAL = (COMPLETED, VALIDATION_FAILED, DUPLICATE_FOUND, FAILED)


class IntakeResult:
    """Successful intake outcome."""

    def __init__(self, enrollment, notification_report=None):
        self.enrollment = enrollment
        self.notification_report = notification_report

    def to_dict(self):
        enrollment = self.enrollment
        return {
            'studentId': enrollment.id,
            'applicationId': enrollment.application_id,
            'email': enrollment.email,
            'course': enrollment.course,
            'status': enrollment.status,
            'submissionTime': enrollment.created_at.isoformat() if enrollment.created_at else None
        }


def mask_idnumber(value):
    if not value:
        return value
    return '***' + str(value)[-4:]


class IntakePipeline:
    """Runs one submission through validation, duplicate check, storage and notification."""

    def __init__(self, notifier, now=None):
        self.notifier = notifier
        self.now = now
        self.state = IntakeState.RECEIVED
        self.history = [IntakeState.RECEIVED]
        self.logger = logging.getLogger('enrollment_service')

    def _advance(self, state):
        self.state = state
        self.history.append(state)

    def submit(self, raw, ip_address=None, user_agent=None):
        """
        Process one raw submission.

        Args:
            raw: Mapping of submitted field names to values
            ip_address: Submitting client's address
            user_agent: Submitting client's User-Agent

        Returns:
            IntakeResult: The stored application and notification outcome

        Raises:
            ValidationError: One or more field rules failed (validation_failed)
            ConflictError: email or idnumber already exists (duplicate_found)
            StorageError: The application could not be stored (failed)
        """
        if self.state != IntakeState.RECEIVED:
            raise RuntimeError('An IntakePipeline processes a single submission')

        logged = {key: value for key, value in raw.items()}
        if 'idnumber' in logged:
            logged['idnumber'] = mask_idnumber(logged['idnumber'])
        self.logger.info(f"Received enrollment data: {logged}")

        # received -> validated
        record, errors = validate_submission(raw, now=self.now)
        if errors:
            self._advance(IntakeState.VALIDATION_FAILED)
            self.logger.info(f"Enrollment validation failed: {errors}")
            raise ValidationError(errors)
        self._advance(IntakeState.VALIDATED)

        # validated -> duplicate_checked
        try:
            duplicate_field = EnrollmentService.find_duplicate(record['email'], record['idnumber'])
        except StorageError:
            self._advance(IntakeState.FAILED)
            raise
        if duplicate_field:
            self._advance(IntakeState.DUPLICATE_FOUND)
            self.logger.info(f"Duplicate enrollment rejected on {duplicate_field}")
            raise ConflictError(duplicate_field)
        self._advance(IntakeState.DUPLICATE_CHECKED)

        # duplicate_checked -> persisted
        try:
            enrollment = EnrollmentService.create_enrollment(record, ip_address, user_agent)
        except ConflictError:
            self._advance(IntakeState.DUPLICATE_FOUND)
            raise
        except StorageError:
            self._advance(IntakeState.FAILED)
            raise
        self._advance(IntakeState.PERSISTED)

        # persisted -> notified
        report = self.notifier.notify(enrollment)
        self._advance(IntakeState.NOTIFIED)

        self._advance(IntakeState.COMPLETED)
        return IntakeResult(enrollment, report)
