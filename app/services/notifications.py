"""Transactional email sender.

Delivery is best effort: every ``send_*`` method returns ``True`` or ``False``
and logs failures instead of raising. Without SMTP settings the message is
only logged, which keeps development and tests offline.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.config import get_settings

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"


def redact_email(email: str) -> str:
    """Shorten an address for logs so recipients are not written out in full."""
    if "@" not in email:
        return "redacted"
    local, domain = email.split("@", 1)
    return f"{local[:2]}***@{domain}"


class NotificationSender:
    """Renders and sends account emails over SMTP."""

    def __init__(self) -> None:
        settings = get_settings()
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_address = settings.SMTP_FROM
        self.site_url = settings.SITE_URL
        self.reset_expire_minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
        self.verification_expire_hours = settings.EMAIL_VERIFICATION_EXPIRE_HOURS
        self.templates = Environment(
            loader=FileSystemLoader(str(TEMPLATE_DIR)),
            autoescape=select_autoescape(["html"]),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    def render(self, template_name: str, subject: str, **context) -> str:
        template = self.templates.get_template(template_name)
        return template.render(subject=subject, site_url=self.site_url, **context)

    def _send(self, to: str, subject: str, html: str) -> bool:
        """Deliver one message. Returns False on any SMTP failure."""
        if not self.is_configured:
            logger.info("Email not configured, skipping send of %r to %s", subject, redact_email(to))
            return True

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = self.from_address
        message["To"] = to
        message.set_content("This message requires an HTML-capable email client.")
        message.add_alternative(html, subtype="html")

        try:
            context = ssl.create_default_context()
            if self.smtp_port == 465:
                with smtplib.SMTP_SSL(self.smtp_host, self.smtp_port, context=context, timeout=30) as server:
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as server:
                    server.starttls(context=context)
                    server.login(self.smtp_user, self.smtp_password)
                    server.send_message(message)
        except (smtplib.SMTPException, ssl.SSLError, OSError) as e:
            logger.error("Failed to send %r to %s: %s", subject, redact_email(to), e)
            return False

        logger.info("Sent %r to %s", subject, redact_email(to))
        return True

    def send_welcome(self, to: str, name: str) -> bool:
        """Welcome email for a new account."""
        subject = "Welcome to PsychedBox!"
        return self._send(to, subject, self.render("welcome.html", subject, name=name))

    def send_password_reset(self, to: str, name: str, reset_url: str) -> bool:
        """Password reset link."""
        subject = "Reset Your Password - PsychedBox"
        html = self.render(
            "password_reset.html",
            subject,
            name=name,
            reset_url=reset_url,
            expires_minutes=self.reset_expire_minutes,
        )
        return self._send(to, subject, html)

    def send_email_verification(self, to: str, name: str, verify_url: str) -> bool:
        """Email ownership confirmation link."""
        subject = "Verify Your Email - PsychedBox"
        html = self.render(
            "email_verification.html",
            subject,
            name=name,
            verify_url=verify_url,
            expires_hours=self.verification_expire_hours,
        )
        return self._send(to, subject, html)


_notification_sender: NotificationSender | None = None


def get_notification_sender() -> NotificationSender:
    """Get singleton notification sender instance."""
    global _notification_sender
    if _notification_sender is None:
        _notification_sender = NotificationSender()
    return _notification_sender
