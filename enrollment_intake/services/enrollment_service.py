# services/enrollment_service.py
"""
Record store for enrollment applications.

All reads and writes of StudentEnrollment rows go through EnrollmentService.
The unique indexes on email and idnumber are the authoritative duplicate
guard; find_duplicate() is only the optimistic pre-check used by the intake
pipeline before it writes.
"""

import logging
import math
import uuid

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from enrollment_intake.errors import ConflictError, NotFoundError, StorageError
from enrollment_intake.extensions import db
from enrollment_intake.models.enrollment import StudentEnrollment

logger = logging.getLogger('enrollment_service')


class Page:
    """One page of a filtered listing."""

    def __init__(self, items, total, page, limit):
        self.items = items
        self.total = total
        self.page = page
        self.limit = limit

    @property
    def pages(self):
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self):
        return {
            'page': self.page,
            'limit': self.limit,
            'total': self.total,
            'pages': self.pages
        }


def is_valid_enrollment_id(enrollment_id):
    """Enrollment ids are stored as lower-case, dashed UUID strings."""
    try:
        canonical = str(uuid.UUID(str(enrollment_id)))
    except ValueError:
        return False
    return canonical == enrollment_id


def _escape_like(term):
    return term.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')


class EnrollmentService:
    """Service class for enrollment record operations."""

    @staticmethod
    def find_duplicate(email, idnumber):
        """
        Look for an existing application sharing email or idnumber.

        Returns:
            str: 'email' or 'idnumber' for the colliding field (email wins when
                 both collide), or None when the submission is unique
        """
        try:
            existing = (
                db.session.query(StudentEnrollment.email, StudentEnrollment.idnumber)
                .filter(or_(StudentEnrollment.email == email, StudentEnrollment.idnumber == idnumber))
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Duplicate check failed: {str(e)}")
            raise StorageError('Error checking for existing applications') from e

        if any(row.email == email for row in existing):
            return 'email'
        if existing:
            return 'idnumber'
        return None

    @staticmethod
    def create_enrollment(record, ip_address=None, user_agent=None):
        """
        Persist a validated application.

        Args:
            record: Normalized field dict produced by the enrollment form
            ip_address: Submitting client's address
            user_agent: Submitting client's User-Agent

        Returns:
            StudentEnrollment: The stored application

        Raises:
            ConflictError: email or idnumber was taken by a concurrent submission
            StorageError: Any other database failure
        """
        enrollment = StudentEnrollment(
            first_name=record['first_name'],
            last_name=record['last_name'],
            email=record['email'],
            phone=record['phone'],
            idnumber=record['idnumber'],
            date_of_birth=record['date_of_birth'],
            course=record['course'],
            address=record['address'],
            city=record['city'],
            zip_code=record['zip_code'],
            emergency_contact=record['emergency_contact'],
            emergency_phone=record['emergency_phone'],
            ip_address=ip_address,
            user_agent=user_agent
        )

        try:
            db.session.add(enrollment)
            db.session.commit()
        except IntegrityError as e:
            db.session.rollback()
            field = EnrollmentService._conflicting_field(record, e)
            logger.warning(f"Unique constraint rejected application on {field}")
            raise ConflictError(field) from e
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to create enrollment: {str(e)}")
            raise StorageError('Error saving enrollment application') from e

        logger.info(f"Enrollment created successfully: {enrollment.application_id}")
        return enrollment

    @staticmethod
    def _conflicting_field(record, error):
        """Work out which unique field a failed insert collided on."""
        try:
            field = EnrollmentService.find_duplicate(record['email'], record['idnumber'])
        except StorageError:
            field = None

        if field:
            return field
        return 'idnumber' if 'idnumber' in str(error.orig) else 'email'

    @staticmethod
    def get_enrollment_by_id(enrollment_id):
        """Get enrollment by ID."""
        try:
            enrollment = db.session.get(StudentEnrollment, enrollment_id)
        except SQLAlchemyError as e:
            logger.error(f"Error getting enrollment by ID: {str(e)}")
            raise StorageError('Error fetching student data') from e

        if not enrollment:
            raise NotFoundError('Student not found')

        return enrollment

    @staticmethod
    def filtered_query(course=None, status=None, search=None):
        """
        Query for applications matching the listing filters, newest first.

        Args:
            course: Exact course name
            status: Exact status value
            search: Case-insensitive substring matched against first name,
                    last name, email and course
        """
        query = db.session.query(StudentEnrollment)

        if course:
            query = query.filter(StudentEnrollment.course == course)

        if status:
            query = query.filter(StudentEnrollment.status == status)

        if search:
            search_pattern = f"%{_escape_like(search)}%"
            query = query.filter(
                or_(
                    StudentEnrollment.first_name.ilike(search_pattern, escape='\\'),
                    StudentEnrollment.last_name.ilike(search_pattern, escape='\\'),
                    StudentEnrollment.email.ilike(search_pattern, escape='\\'),
                    StudentEnrollment.course.ilike(search_pattern, escape='\\')
                )
            )

        return query.order_by(StudentEnrollment.created_at.desc(), StudentEnrollment.id)

    @staticmethod
    def list_enrollments(course=None, status=None, search=None, page=1, limit=20):
        """
        Filtered, paginated listing.

        Returns:
            Page: Items on the requested page plus totals
        """
        query = EnrollmentService.filtered_query(course, status, search)

        try:
            total = query.order_by(None).count()
            items = (
                query
                .offset((page - 1) * limit)
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            logger.error(f"Error listing enrollments: {str(e)}")
            raise StorageError('Error fetching student data') from e

        return Page(items, total, page, limit)

    @staticmethod
    def update_status(enrollment_id, new_status):
        """
        Decide a pending application.

        Raises:
            NotFoundError: No application with that id
            ValueError: The transition is not allowed
        """
        enrollment = EnrollmentService.get_enrollment_by_id(enrollment_id)

        if new_status == 'approved':
            enrollment.approve()
        elif new_status == 'rejected':
            enrollment.reject()
        else:
            raise ValueError(f"Unknown status '{new_status}'")

        try:
            enrollment.save()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to update enrollment status: {str(e)}")
            raise StorageError('Error updating enrollment status') from e

        logger.info(f"Enrollment {enrollment.application_id} marked {new_status}")
        return enrollment
