"""
Transactional email: account verification, password reset and password
change confirmation.

Outside production the messages are only logged so local development never
needs SMTP credentials.
"""

import logging
import smtplib
import ssl
from datetime import datetime, timezone
from email.message import EmailMessage
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from app.config import settings

logger = logging.getLogger("dietplanner.email")

_FOOTER = "<p>&copy; {year} Diet Planner. All rights reserved.</p>"


def _html_page(title: str, body: str) -> str:
    return (
        "<!DOCTYPE html><html><body style=\"font-family: Arial, sans-serif; color: #333;\">"
        f"<h1 style=\"color: #4CAF50;\">{title}</h1>{body}"
        f"{_FOOTER.format(year=datetime.now(timezone.utc).year)}</body></html>"
    )


class EmailService:
    """Builds messages and delivers them over SMTP (or logs them in development)"""

    def __init__(self, dev_mode: Optional[bool] = None):
        self.dev_mode = (not settings.is_production()) if dev_mode is None else dev_mode
        self._executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="email")
        if self.dev_mode:
            logger.info("Email service in development mode; emails are logged, not sent")

    # ------------------------------------------------------------------ delivery

    def dispatch(self, send: Callable, *args) -> None:
        """
        Fire-and-forget delivery for request handlers.

        Failures are logged and never reach the caller. Development mode runs
        inline since nothing leaves the process.
        """
        if self.dev_mode:
            try:
                send(*args)
            except Exception as e:
                logger.error("email_dispatch_failed send=%s error=%s", send.__name__, e)
            return

        future = self._executor.submit(send, *args)

        def _log_failure(done):
            exc = done.exception()
            if exc is not None:
                logger.error("email_dispatch_failed send=%s error=%s", send.__name__, exc)

        future.add_done_callback(_log_failure)

    def _send(self, to: str, subject: str, text: str, html: str, **log_fields) -> None:
        if self.dev_mode:
            extra = " ".join(f"{key}={value}" for key, value in log_fields.items())
            logger.info("email_not_sent_dev to=%s subject=%r %s", to, subject, extra)
            return

        message = EmailMessage()
        message["From"] = settings.from_email
        message["To"] = to
        message["Subject"] = subject
        message.set_content(text)
        message.add_alternative(html, subtype="html")

        if settings.smtp_secure:
            server = smtplib.SMTP_SSL(
                settings.smtp_host, settings.smtp_port, context=ssl.create_default_context()
            )
        else:
            server = smtplib.SMTP(settings.smtp_host, settings.smtp_port)
        with server:
            if not settings.smtp_secure:
                server.starttls(context=ssl.create_default_context())
            if settings.smtp_user:
                server.login(settings.smtp_user, settings.smtp_pass or "")
            server.send_message(message)
        logger.info("email_sent to=%s subject=%r", to, subject)

    # ------------------------------------------------------------------ messages

    def send_verification_email(self, email: str, name: str, token: str) -> None:
        url = f"{settings.client_url}/verify-email?token={token}"
        subject = "Verify Your Email - Diet Planner"
        text = (
            f"Hi {name},\n\nThank you for registering with Diet Planner!\n"
            f"Please verify your email address by opening this link:\n{url}\n\n"
            "If you didn't create an account with Diet Planner, please ignore this email."
        )
        html = _html_page(
            "Welcome to Diet Planner!",
            f"<h2>Hi {name},</h2>"
            "<p>Thank you for registering with Diet Planner! We're excited to help you on your health journey.</p>"
            f"<p><a href=\"{url}\">Verify Email Address</a></p>"
            f"<p>Or copy and paste this link into your browser:<br>{url}</p>"
            "<p>If you didn't create an account with Diet Planner, please ignore this email.</p>",
        )
        self._send(email, subject, text, html, verification_url=url)

    def send_password_reset_email(self, email: str, name: str, token: str) -> None:
        url = f"{settings.client_url}/reset-password?token={token}"
        subject = "Reset Your Password - Diet Planner"
        text = (
            f"Hi {name},\n\nWe received a request to reset your Diet Planner password.\n"
            f"Open this link to choose a new one (valid for 1 hour):\n{url}\n\n"
            "If you didn't request this, you can ignore this email."
        )
        html = _html_page(
            "Password Reset Request",
            f"<h2>Hi {name},</h2>"
            "<p>We received a request to reset your password for your Diet Planner account.</p>"
            f"<p><a href=\"{url}\">Reset Password</a></p>"
            f"<p>Or copy and paste this link into your browser:<br>{url}</p>"
            "<p>This link expires in 1 hour. If you didn't request a reset, ignore this email.</p>",
        )
        self._send(email, subject, text, html, reset_url=url, expires="1h")

    def send_password_changed_confirmation(self, email: str, name: str) -> None:
        subject = "Password Changed Successfully - Diet Planner"
        text = (
            f"Hi {name},\n\nYour password has been successfully changed.\n"
            "If you didn't change your password, please contact our support team immediately."
        )
        html = _html_page(
            "Password Changed",
            f"<h2>Hi {name},</h2>"
            "<p><strong>Your password has been successfully changed.</strong></p>"
            "<p>If you made this change, no further action is needed.</p>"
            "<p>If you didn't change your password, please contact our support team immediately.</p>",
        )
        self._send(email, subject, text, html)


email_service = EmailService()
