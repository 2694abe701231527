# controllers/enrollment/enrollment.py
from flask import current_app, jsonify, request

from enrollment_intake.extensions import limiter, submission_rate_limit
from enrollment_intake.utils.client import get_client_address, get_user_agent

from . import enrollment_bp

SUBMISSION_LIMIT_MESSAGE = 'Too many enrollment attempts. Please try again in 15 minutes.'


def _submission_payload():
    """Submitted fields from a JSON body, falling back to form encoding."""
    data = request.get_json(silent=True)
    if isinstance(data, dict):
        return data
    return request.form.to_dict()


@enrollment_bp.route('/send', methods=['POST'])
@enrollment_bp.route('/api/route', methods=['POST'])
@limiter.shared_limit(submission_rate_limit, scope='enrollment-submission',
                      error_message=SUBMISSION_LIMIT_MESSAGE, override_defaults=False)
def submit_enrollment():
    """Submit an enrollment application."""
    from enrollment_intake.services.intake_pipeline import IntakePipeline

    pipeline = IntakePipeline(current_app.extensions['enrollment_notifier'])

    result = pipeline.submit(
        _submission_payload(),
        ip_address=get_client_address(),
        user_agent=get_user_agent()
    )

    return jsonify({
        'success': True,
        'message': 'Enrollment application submitted successfully! '
                   'Please check your email for confirmation details.',
        'data': result.to_dict()
    }), 201


@enrollment_bp.route('/test-email', methods=['POST'])
def send_test_email():
    """Send a configuration check message; not available in production."""
    if current_app.config.get('ENVIRONMENT') == 'production':
        return jsonify({
            'success': False,
            'message': 'Test endpoint not available in production'
        }), 403

    notifier = current_app.extensions['enrollment_notifier']
    payload = _submission_payload()
    recipient = payload.get('email') or notifier.settings.admin_recipient
    if not recipient:
        return jsonify({
            'success': False,
            'message': 'No recipient given and no administrator address configured'
        }), 400

    try:
        notifier.send_test_email(recipient)
    except Exception as e:
        current_app.logger.error(f"Test email failed: {str(e)}")
        return jsonify({
            'success': False,
            'message': 'Failed to send test email',
            'error': str(e)
        }), 500

    return jsonify({
        'success': True,
        'message': 'Test email sent successfully'
    })
