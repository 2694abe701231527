# services/notification_service.py
"""
Applicant and administrator notifications for new enrollment applications.

Both messages are rendered in the calling context and delivered concurrently.
Delivery is best effort: failures are logged for manual follow-up and never
reach the caller, because the application is already stored by the time the
notifier runs.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import datetime

from flask import render_template

from enrollment_intake.errors import NotificationError
from enrollment_intake.utils.mailer import build_message, create_transport


class NotificationReport:
    """Outcome of one notify() call."""

    def __init__(self):
        self.sent = []
        self.failed = []

    @property
    def delivered(self):
        return bool(self.sent) and not self.failed

    def to_dict(self):
        return {
            'sent': list(self.sent),
            'failed': [{'recipient': e.recipient, 'reason': e.reason} for e in self.failed]
        }


class EnrollmentNotifier:
    """Renders and dispatches enrollment emails through an injected transport."""

    def __init__(self, settings, transport=None, site_name='EduPlatform', contact_phone=None,
                 public_base_url=''):
        self.settings = settings
        self.transport = transport or create_transport(settings)
        self.site_name = site_name
        self.contact_phone = contact_phone
        self.public_base_url = public_base_url.rstrip('/')
        self.logger = logging.getLogger('notification_service')

    def _context(self, enrollment):
        return {
            'enrollment': enrollment,
            'application_id': enrollment.application_id,
            'site_name': self.site_name,
            'contact_email': self.settings.admin_recipient,
            'contact_phone': self.contact_phone,
            'submitted_on': (enrollment.created_at or datetime.now()).strftime('%B %d, %Y at %I:%M %p'),
            'details_url': f"{self.public_base_url}/api/students/{enrollment.id}",
            'listing_url': f"{self.public_base_url}/api/students?status=pending"
        }

    def build_messages(self, enrollment):
        """
        Render the applicant confirmation and, when an administrator address is
        configured, the administrator notification.

        Returns:
            list: MIME messages ready for the transport
        """
        context = self._context(enrollment)

        messages = [
            build_message(
                sender=self.settings.sender(f"{self.site_name} Admissions"),
                recipient=enrollment.email,
                subject='🎓 Enrollment Application Received - Confirmation Required',
                html_body=render_template('emails/student_confirmation.html', **context),
                text_body=render_template('emails/student_confirmation.txt', **context)
            )
        ]

        if self.settings.admin_recipient:
            messages.append(
                build_message(
                    sender=self.settings.sender(f"{self.site_name} System"),
                    recipient=self.settings.admin_recipient,
                    subject=f"🚨 New Enrollment: {enrollment.full_name} - {enrollment.course}",
                    html_body=render_template('emails/admin_notification.html', **context),
                    text_body=render_template('emails/admin_notification.txt', **context)
                )
            )
        else:
            self.logger.warning("No administrator recipient configured; skipping admin notification")

        return messages

    def _deliver(self, msg):
        try:
            self.transport.send(msg)
        except Exception as e:
            raise NotificationError(msg['To'], str(e)) from e
        return msg['To']

    def notify(self, enrollment):
        """
        Send both notifications for a stored application. Never raises.

        Returns:
            NotificationReport: Recipients reached and failures
        """
        report = NotificationReport()

        try:
            messages = self.build_messages(enrollment)
        except Exception as e:
            self.logger.error(
                f"Failed to render notifications for application {enrollment.application_id}: {str(e)}",
                exc_info=True)
            report.failed.append(NotificationError(enrollment.email, f"render failed: {e}"))
            return report

        with ThreadPoolExecutor(max_workers=len(messages), thread_name_prefix='EmailWorker') as pool:
            futures = [pool.submit(self._deliver, msg) for msg in messages]

            for future in as_completed(futures):
                try:
                    report.sent.append(future.result())
                except NotificationError as e:
                    report.failed.append(e)
                    self.logger.error(
                        f"Email to {e.recipient} for application {enrollment.application_id} failed, "
                        f"needs manual follow-up: {e.reason}")

        if report.delivered:
            self.logger.info(f"All emails sent for application {enrollment.application_id}")

        return report

    def send_test_email(self, recipient):
        """Send a configuration check message synchronously; delivery errors propagate."""
        msg = build_message(
            sender=self.settings.sender(f"{self.site_name} Test"),
            recipient=recipient,
            subject=f"Test Email from {self.site_name}",
            html_body='<h1>Test Email</h1>'
                      '<p>If you receive this, your email configuration is working correctly!</p>',
            text_body='Test Email\n\nIf you receive this, your email configuration is working correctly!'
        )
        self.transport.send(msg)
        self.logger.info(f"Test email sent to {recipient}")
