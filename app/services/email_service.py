"""Email service for account notifications."""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from app.core.config import settings

logger = logging.getLogger(__name__)

# Dropped connections are retried, rejected mail is not
TRANSIENT_SMTP_ERRORS = (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected)


class EmailService:
    """Service for sending emails via SMTP."""

    def __init__(self):
        """Initialize email service with SMTP configuration."""
        self.smtp_host = settings.smtp_host
        self.smtp_port = settings.smtp_port
        self.smtp_user = settings.smtp_user
        self.smtp_password = settings.smtp_password
        self.starttls = settings.smtp_starttls
        self.from_email = settings.email_from or settings.smtp_user
        self.dry_run = settings.email_dry_run
        self.frontend_url = settings.frontend_url.rstrip("/")

    def _validate_config(self) -> bool:
        """Validate email configuration."""
        if not self.smtp_host or not self.from_email:
            logger.warning("Email service not configured properly")
            return False
        return True

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str | None = None,
    ) -> bool:
        """Send an email via SMTP.

        Args:
            to_email: Recipient email address
            subject: Email subject
            html_content: HTML content of the email
            text_content: Plain text content (fallback)

        Returns:
            True if email sent successfully, False otherwise
        """
        if self.dry_run:
            logger.info(f"📭 Dry run, email to {to_email} not sent: {subject}")
            logger.debug(text_content or html_content)
            return True

        if not self._validate_config():
            logger.error("Cannot send email - configuration invalid")
            return False

        try:
            msg = MIMEMultipart("alternative")
            msg["Subject"] = subject
            msg["From"] = self.from_email
            msg["To"] = to_email

            if text_content:
                msg.attach(MIMEText(text_content, "plain"))
            msg.attach(MIMEText(html_content, "html"))

            logger.info(f"Sending email to {to_email} with subject: {subject}")
            self._deliver(msg)

            logger.info(f"✅ Email sent successfully to {to_email}")
            return True

        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"❌ SMTP authentication failed: {str(e)}")
            return False
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"❌ SMTP error sending email: {str(e)}")
            return False

    @retry(
        retry=retry_if_exception_type(TRANSIENT_SMTP_ERRORS),
        stop=stop_after_attempt(settings.smtp_max_retry_attempts),
        wait=wait_exponential(
            multiplier=settings.smtp_retry_backoff_factor,
            min=settings.smtp_retry_min_wait,
            max=settings.smtp_retry_max_wait,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    def _deliver(self, msg: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port) as server:
            if self.starttls:
                server.starttls()
            if self.smtp_user and self.smtp_password:
                server.login(self.smtp_user, self.smtp_password)
            server.send_message(msg)

    def send_account_activation(self, to_email: str, account_name: str, token: str) -> bool:
        link = f"{self.frontend_url}/activate/{token}"
        return self._send_notice(
            to_email,
            "Activate your account",
            account_name,
            "Thanks for signing up. Open the link below to activate your account.",
            link,
        )

    def send_password_reset(self, to_email: str, account_name: str, token: str) -> bool:
        link = f"{self.frontend_url}/password-reset/{token}"
        return self._send_notice(
            to_email,
            "Reset your password",
            account_name,
            "We received a request to reset your password. "
            "If you did not ask for it, ignore this message.",
            link,
        )

    def send_account_suspended(self, to_email: str, account_name: str) -> bool:
        return self._send_notice(
            to_email,
            "Your account has been suspended",
            account_name,
            "Your account has been suspended by an administrator. "
            "You will not be able to sign in until the suspension is lifted.",
        )

    def send_account_deleted(self, to_email: str, account_name: str) -> bool:
        return self._send_notice(
            to_email,
            "Your account has been deleted",
            account_name,
            "Your account and all of its content have been deleted by an administrator.",
        )

    def _send_notice(
        self,
        to_email: str,
        subject: str,
        account_name: str,
        body: str,
        link: str | None = None,
    ) -> bool:
        link_html = ""
        link_text = ""
        if link:
            link_html = f"""
                <p style="text-align: center; margin-top: 30px;">
                    <a href="{link}"
                       style="display: inline-block; background-color: #2563eb; color: white; text-decoration: none; padding: 12px 30px; border-radius: 8px;">
                        Continue
                    </a>
                </p>
            """
            link_text = f"\n\n{link}\n"

        html = f"""
        <!DOCTYPE html>
        <html>
        <head><meta charset="UTF-8"><title>{subject}</title></head>
        <body style="margin: 0; padding: 0; font-family: Arial, sans-serif; background-color: #f3f4f6;">
            <div style="max-width: 600px; margin: 0 auto; padding: 20px; background-color: white;">
                <h1 style="color: #1f2937; font-size: 22px;">{subject}</h1>
                <p style="color: #374151;">Hi <strong>{account_name}</strong>,</p>
                <p style="color: #6b7280; line-height: 1.6;">{body}</p>
                {link_html}
            </div>
        </body>
        </html>
        """
        text = f"Hi {account_name},\n\n{body}{link_text}"

        return self.send_email(to_email, subject, html, text)


# Create singleton instance
email_service = EmailService()
