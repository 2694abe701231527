# errors.py
"""
Error taxonomy for the enrollment intake service.

Only ValidationError, ConflictError and NotFoundError describe expected
outcomes with their own response shapes. StorageError and anything else
collapse into a generic server error. NotificationError never leaves the
notification service.
"""


class IntakeError(Exception):
    """Base class for all service errors."""

    status_code = 500

    def __init__(self, message=None):
        super().__init__(message or self.__class__.__name__)
        self.message = message or 'Internal server error'


class ValidationError(IntakeError):
    """A submission failed one or more field rules."""

    status_code = 400

    def __init__(self, errors):
        super().__init__('Validation failed')
        self.errors = list(errors)


class ConflictError(IntakeError):
    """A unique field (email or idnumber) is already taken."""

    status_code = 409

    FIELD_LABELS = {
        'email': 'email',
        'idnumber': 'ID number'
    }

    def __init__(self, field):
        label = self.FIELD_LABELS.get(field, field)
        super().__init__(f'A student with this {label} already exists')
        self.field = field


class NotFoundError(IntakeError):
    status_code = 404

    def __init__(self, message='Student not found'):
        super().__init__(message)


class StorageError(IntakeError):
    """Unexpected persistence failure."""

    status_code = 500


class NotificationError(IntakeError):
    """Delivery of a notification message failed."""

    def __init__(self, recipient, reason):
        super().__init__(f'Failed to deliver message to {recipient}: {reason}')
        self.recipient = recipient
        self.reason = reason
