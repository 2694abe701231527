# controllers/api/students.py
"""
Read-only student listing and lookup for administrators.
"""

from flask import current_app, jsonify, request

from enrollment_intake.services.enrollment_service import EnrollmentService, is_valid_enrollment_id

from . import api_bp


def _page_args():
    default_limit = current_app.config.get('STUDENTS_PER_PAGE', 20)
    max_limit = current_app.config.get('STUDENTS_MAX_PER_PAGE', 100)

    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', default_limit, type=int)

    if page < 1:
        page = 1
    if limit < 1:
        limit = default_limit

    return page, min(limit, max_limit)


@api_bp.route('/students')
def list_students():
    """Paginated application listing with course, status and search filters."""
    page, limit = _page_args()

    result = EnrollmentService.list_enrollments(
        course=request.args.get('course', '', type=str).strip() or None,
        status=request.args.get('status', '', type=str).strip() or None,
        search=request.args.get('search', '', type=str).strip() or None,
        page=page,
        limit=limit
    )

    return jsonify({
        'success': True,
        'data': {
            'students': [enrollment.to_dict() for enrollment in result.items],
            'pagination': result.pagination()
        }
    })


@api_bp.route('/students/<student_id>')
def get_student(student_id):
    """Single application by id."""
    if not is_valid_enrollment_id(student_id):
        return jsonify({
            'success': False,
            'message': 'Invalid student ID format'
        }), 400

    enrollment = EnrollmentService.get_enrollment_by_id(student_id)

    return jsonify({
        'success': True,
        'data': {'student': enrollment.to_dict()}
    })
