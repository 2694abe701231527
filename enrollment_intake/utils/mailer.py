# utils/mailer.py
"""
Mail provider settings and SMTP transport.

MailSettings is resolved once from the application config in the application
factory and handed to the notification service; nothing in here reads
current_app, so transports can be used from worker threads.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, parseaddr


class MailProvider:
    """Supported mail providers."""
    GMAIL = 'gmail'
    SENDGRID = 'sendgrid'
    MAILGUN = 'mailgun'
    OUTLOOK = 'outlook'
    SMTP = 'smtp'

    # provider -> (host, port, use_ssl, use_tls)
    SERVERS = {
        GMAIL: ('smtp.gmail.com', 465, True, False),
        SENDGRID: ('smtp.sendgrid.net', 587, False, True),
        MAILGUN: ('smtp.mailgun.org', 587, False, True),
        OUTLOOK: ('smtp-mail.outlook.com', 587, False, True),
    }

    ALL = (GMAIL, SENDGRID, MAILGUN, OUTLOOK, SMTP)


class MailSettings:
    """Resolved SMTP connection details plus sender and admin recipient."""

    def __init__(self, provider, host, port, username=None, password=None, use_ssl=False,
                 use_tls=False, default_sender=None, admin_recipient=None, suppress_send=False,
                 timeout=30, debug=False):
        self.provider = provider
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_ssl = use_ssl
        self.use_tls = use_tls
        self.default_sender = default_sender
        self.admin_recipient = admin_recipient
        self.suppress_send = suppress_send
        self.timeout = timeout
        self.debug = debug

    @classmethod
    def from_config(cls, config):
        """
        Build settings from a Flask config mapping.

        Raises:
            ValueError: The configured provider is not supported
        """
        provider = (config.get('MAIL_PROVIDER') or MailProvider.GMAIL).lower()
        if provider not in MailProvider.ALL:
            raise ValueError(f"Unsupported email service: {provider}")

        username = config.get('MAIL_USERNAME')
        password = config.get('MAIL_PASSWORD')

        if provider == MailProvider.SMTP:
            host = config.get('MAIL_SERVER')
            port = config.get('MAIL_PORT', 587)
            use_ssl = config.get('MAIL_USE_SSL', False)
            use_tls = config.get('MAIL_USE_TLS', False) and not use_ssl
        else:
            host, port, use_ssl, use_tls = MailProvider.SERVERS[provider]

        # Relay services authenticate with their own credentials
        login = username
        if provider == MailProvider.SENDGRID:
            login, password = 'apikey', config.get('SENDGRID_API_KEY')
        elif provider == MailProvider.MAILGUN:
            login, password = config.get('MAILGUN_SMTP_LOGIN'), config.get('MAILGUN_SMTP_PASSWORD')

        default_sender = config.get('MAIL_DEFAULT_SENDER') or username

        return cls(
            provider=provider,
            host=host,
            port=port,
            username=login,
            password=password,
            use_ssl=use_ssl,
            use_tls=use_tls,
            default_sender=default_sender,
            admin_recipient=config.get('MAIL_ADMIN_RECIPIENT') or username,
            suppress_send=config.get('MAIL_SUPPRESS_SEND', False),
            timeout=config.get('MAIL_TIMEOUT', 30),
            debug=config.get('DEBUG', False)
        )

    def validate(self):
        """
        Check the settings for problems worth reporting at start-up.

        Returns:
            list: Configuration issues found
        """
        issues = []

        if self.suppress_send:
            issues.append("MAIL_SUPPRESS_SEND=True will prevent email sending")

        if not self.host:
            issues.append("Missing SMTP server (MAIL_SERVER)")
        if not self.username or not self.password:
            issues.append(f"Missing credentials for mail provider '{self.provider}'")
        if not self.default_sender:
            issues.append("Missing sender address (MAIL_DEFAULT_SENDER or EMAIL_USER)")

        # Check port/security alignment
        if self.port == 465 and self.use_tls and not self.use_ssl:
            issues.append("Port 465 typically uses SSL, not TLS. Consider using port 587 for TLS")
        elif self.port == 587 and self.use_ssl and not self.use_tls:
            issues.append("Port 587 typically uses TLS, not SSL. Consider using port 465 for SSL")

        # Gmail specific checks
        if self.provider == MailProvider.GMAIL and self.password and len(self.password) < 16:
            issues.append("Gmail requires App Password (16 characters) since May 2022")

        return issues

    def sender(self, display_name):
        """Default sender address under a display name."""
        _, address = parseaddr(self.default_sender or '')
        return formataddr((display_name, address)) if address else self.default_sender


def build_message(sender, recipient, subject, html_body=None, text_body=None):
    """Multipart message with plain-text and HTML alternatives."""
    msg = MIMEMultipart('alternative')
    msg['Subject'] = subject
    msg['From'] = sender
    msg['To'] = recipient
    msg['X-Priority'] = '1'
    msg['Importance'] = 'high'

    if text_body:
        msg.attach(MIMEText(text_body, 'plain', 'utf-8'))
    if html_body:
        msg.attach(MIMEText(html_body, 'html', 'utf-8'))

    return msg


class SMTPTransport:
    """Delivers messages over SMTP using resolved MailSettings."""

    def __init__(self, settings):
        self.settings = settings
        self.logger = logging.getLogger('email_service')

    def send(self, msg):
        server = self._create_smtp_connection()
        try:
            if self.settings.username and self.settings.password:
                server.login(self.settings.username, self.settings.password)
            server.send_message(msg)
        except smtplib.SMTPAuthenticationError:
            self.logger.error(
                "SMTP authentication failed. Check the mail credentials; for Gmail use an App Password.")
            raise
        finally:
            try:
                server.quit()
            except smtplib.SMTPException:
                server.close()

    def _create_smtp_connection(self):
        """Create SMTP connection honouring the provider's SSL/TLS mode."""
        settings = self.settings

        if settings.use_ssl:
            self.logger.debug(f"Creating SMTP_SSL connection to {settings.host}:{settings.port}")
            server = smtplib.SMTP_SSL(settings.host, settings.port, timeout=settings.timeout)
        else:
            self.logger.debug(f"Creating SMTP connection to {settings.host}:{settings.port}")
            server = smtplib.SMTP(settings.host, settings.port, timeout=settings.timeout)

            if settings.use_tls:
                self.logger.debug("Upgrading connection to TLS")
                try:
                    server.starttls()
                except (smtplib.SMTPException, OSError):
                    server.close()
                    raise

        # Enable debug output in development
        if settings.debug:
            server.set_debuglevel(1)

        return server


class SuppressedTransport:
    """Logs messages instead of sending them (MAIL_SUPPRESS_SEND)."""

    def __init__(self):
        self.logger = logging.getLogger('email_service')

    def send(self, msg):
        self.logger.info(f"Mail suppressed: '{msg['Subject']}' to {msg['To']}")


def create_transport(settings):
    if settings.suppress_send:
        return SuppressedTransport()
    return SMTPTransport(settings)
