"""Email service using SendGrid."""

import logging

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

logger = logging.getLogger(__name__)


class EmailService:
    """Service for sending transactional emails via SendGrid.

    Sends return ``True`` only when SendGrid accepted the message; callers
    treat ``False`` as a delivery failure.
    """

    def __init__(self, api_key: str, from_address: str, from_name: str) -> None:
        self._api_key = api_key
        self._from = (from_address, from_name)

    def _send_email(self, to_email: str, subject: str, html_content: str) -> bool:
        """Send email via SendGrid. Returns True if successful."""
        if not self._api_key:
            logger.warning("SendGrid API key not configured, skipping email send")
            return False

        message = Mail(
            from_email=self._from,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )

        try:
            sg = SendGridAPIClient(self._api_key)
            response = sg.send(message)
            logger.info(f"Email sent to {to_email}, status: {response.status_code}")
            return response.status_code in (200, 201, 202)
        except Exception:
            logger.exception(f"Failed to send email to {to_email}")
            return False

    def send_otp_email(self, email: str, code: str, expires_minutes: int = 10) -> bool:
        """Send a one-time verification code."""
        html = f"""
        <h2>Your Verification Code</h2>
        <p>Use this code to continue signing in to Notekeeper:</p>
        <h1 style="font-size: 32px; letter-spacing: 8px; font-family: monospace;">{code}</h1>
        <p>This code expires in {expires_minutes} minutes.</p>
        <p>If you didn't request this code, you can ignore this email.</p>
        """
        return self._send_email(email, "Your Notekeeper Verification Code", html)
