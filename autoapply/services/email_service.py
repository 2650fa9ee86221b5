"""
AutoApply - Email Service

Sends application emails over SMTP (Gmail by default) with the CV attached.
Delivery failures raise EmailServiceError.
"""
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, make_msgid
from typing import Optional
import html
import logging
import os

import aiosmtplib

from ..config import settings
from .cv_loader import find_cv_file

logger = logging.getLogger("autoapply.email")


class EmailServiceError(Exception):
    """Custom exception for email delivery errors."""
    pass


class EmailService:
    """Async SMTP email service."""

    def is_configured(self) -> bool:
        """Check if SMTP credentials are set."""
        return bool(
            settings.email.smtp_host
            and settings.email.smtp_username
            and settings.email.smtp_password
        )

    @staticmethod
    def body_to_html(body: str) -> str:
        """Plain text to minimal HTML, keeping line breaks."""
        return html.escape(body).replace("\n", "<br>")

    def build_message(
        self, to_email: str, subject: str, body: str, attachment_path: Optional[str] = None
    ) -> MIMEMultipart:
        """Build a text+HTML message, attaching the CV if one can be found."""
        message = MIMEMultipart("mixed")
        message["From"] = formataddr((settings.email.email_from_name, settings.email.smtp_username))
        message["To"] = to_email
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()

        alternative = MIMEMultipart("alternative")
        alternative.attach(MIMEText(body, "plain", "utf-8"))
        alternative.attach(MIMEText(self.body_to_html(body), "html", "utf-8"))
        message.attach(alternative)

        cv_path = attachment_path or find_cv_file()
        if cv_path:
            filename = os.path.basename(cv_path)
            with open(cv_path, "rb") as f:
                part = MIMEApplication(f.read(), Name=filename)
            part["Content-Disposition"] = f'attachment; filename="{filename}"'
            message.attach(part)
            logger.info("Attaching CV: %s", filename)
        else:
            logger.warning("No CV file found to attach")

        return message

    async def send_email(self, to_email: str, subject: str, body: str) -> str:
        """
        Send an application email.

        Returns:
            The Message-ID of the sent email

        Raises:
            EmailServiceError: If SMTP is not configured or delivery fails
        """
        if not self.is_configured():
            logger.warning("Email not configured - refusing to send to %s", to_email)
            raise EmailServiceError(
                "Email is not configured. Set AUTOAPPLY_SMTP_USERNAME and AUTOAPPLY_SMTP_PASSWORD."
            )

        try:
            message = self.build_message(to_email, subject, body)
            await aiosmtplib.send(
                message,
                hostname=settings.email.smtp_host,
                port=settings.email.smtp_port,
                username=settings.email.smtp_username,
                password=settings.email.smtp_password,
                start_tls=settings.email.smtp_use_tls,
                timeout=settings.email.smtp_timeout,
            )
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email via SMTP to %s: %s", to_email, e)
            raise EmailServiceError("Failed to send email. Check your SMTP credentials.") from e

        message_id = message["Message-ID"]
        logger.info("Email sent to %s: %s (%s)", to_email, subject, message_id)
        return message_id


# Global instance
email_service = EmailService()
