# models/__init__.py
from .base import BaseModel
from .enrollment import StudentEnrollment, EnrollmentStatus, COURSE_CATALOG

__all__ = [
    'BaseModel',
    'StudentEnrollment',
    'EnrollmentStatus',
    'COURSE_CATALOG'
]
