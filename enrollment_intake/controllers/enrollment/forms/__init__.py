# forms/__init__.py
"""
Forms package for the enrollment intake service.

The enrollment form is the validator for public submissions: it sanitizes
every field, applies the presence, format and age rules, and produces the
normalized record candidate that the intake pipeline stores.
"""

from .enrollment import (
    EnrollmentForm,
    PhoneNumber,
    WIRE_FIELDS,
    calculate_age,
    sanitize_input,
    validate_submission
)

__all__ = [
    'EnrollmentForm',
    'PhoneNumber',
    'WIRE_FIELDS',
    'calculate_age',
    'sanitize_input',
    'validate_submission'
]
