# models/enrollment.py
from datetime import datetime

from sqlalchemy import Index

from enrollment_intake.extensions import db
from .base import BaseModel


class EnrollmentStatus:
    """Enrollment status constants."""
    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    ALL = (PENDING, APPROVED, REJECTED)

    # Only pending applications can be decided
    TRANSITIONS = {
        PENDING: (APPROVED, REJECTED),
        APPROVED: (),
        REJECTED: ()
    }


COURSE_CATALOG = (
    'Computer Science',
    'Business Administration',
    'Engineering',
    'Medicine',
    'Arts & Design',
    'Psychology',
    'Mathematics',
    'Literature',
    'Information Technology',
    'Project Management'
)


class StudentEnrollment(BaseModel):
    """Enrollment application submitted through the public form."""

    __tablename__ = 'student_enrollment'

    # Personal Information
    first_name = db.Column(db.String(50), nullable=False)
    last_name = db.Column(db.String(50), nullable=False)
    date_of_birth = db.Column(db.Date, nullable=False)

    # Identity (both unique)
    email = db.Column(db.String(255), nullable=False)
    idnumber = db.Column(db.String(50), nullable=False)

    # Contact Information
    phone = db.Column(db.String(30), nullable=False)
    address = db.Column(db.String(255), nullable=False)
    city = db.Column(db.String(100), nullable=False)
    zip_code = db.Column(db.String(20), nullable=False)
    emergency_contact = db.Column(db.String(100), nullable=False)
    emergency_phone = db.Column(db.String(30), nullable=False)

    # Course selection and processing
    course = db.Column(db.String(100), nullable=False)
    status = db.Column(db.String(20), default=EnrollmentStatus.PENDING, nullable=False)
    enrollment_date = db.Column(db.DateTime, default=datetime.now, nullable=False)
    processed_at = db.Column(db.DateTime, nullable=True)

    # Provenance
    ip_address = db.Column(db.String(64), nullable=True)
    user_agent = db.Column(db.String(512), nullable=True)

    __table_args__ = (
        # Unique indexes for business constraints
        Index('uq_enrollment_email', 'email', unique=True),
        Index('uq_enrollment_idnumber', 'idnumber', unique=True),

        # Single column indexes for listing filters
        Index('idx_enrollment_course', 'course'),
        Index('idx_enrollment_status', 'status'),
        Index('idx_enrollment_date', 'enrollment_date'),

        # Names search index for admin lookups
        Index('idx_enrollment_names', 'last_name', 'first_name'),
    )

    @property
    def application_id(self):
        """Short human-readable identifier shown to applicants."""
        return self.id[-8:].upper() if self.id else None

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}"

    def _transition(self, new_status):
        allowed = EnrollmentStatus.TRANSITIONS.get(self.status, ())
        if new_status not in allowed:
            raise ValueError(f"Cannot change status from '{self.status}' to '{new_status}'")

        self.status = new_status
        self.processed_at = datetime.now()

    def approve(self):
        """Approve a pending application."""
        self._transition(EnrollmentStatus.APPROVED)

    def reject(self):
        """Reject a pending application."""
        self._transition(EnrollmentStatus.REJECTED)

    def to_dict(self):
        """Public representation with the field names used by the enrollment form."""
        return {
            'id': self.id,
            'applicationId': self.application_id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'email': self.email,
            'phone': self.phone,
            'idnumber': self.idnumber,
            'dateOfBirth': self.date_of_birth.isoformat() if self.date_of_birth else None,
            'course': self.course,
            'address': self.address,
            'city': self.city,
            'zipCode': self.zip_code,
            'emergencyContact': self.emergency_contact,
            'emergencyPhone': self.emergency_phone,
            'status': self.status,
            'enrollmentDate': self.enrollment_date.isoformat() if self.enrollment_date else None,
            'processedAt': self.processed_at.isoformat() if self.processed_at else None,
            'ipAddress': self.ip_address,
            'userAgent': self.user_agent,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None
        }

    def __repr__(self):
        return f'<StudentEnrollment {self.application_id} - {self.full_name}>'
