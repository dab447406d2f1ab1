"""Outbound e-mail over SMTP (password reset codes)."""

import logging
import smtplib
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Optional

from app.core.config import SMTPSettings, settings

logger = logging.getLogger(__name__)


class EmailService:
    """Send e-mails through the configured SMTP server."""

    def __init__(self, smtp: Optional[SMTPSettings] = None):
        self.smtp = smtp or settings.smtp

    @property
    def is_configured(self) -> bool:
        return bool(self.smtp.host) and bool(self.smtp.user)

    def send_email(self, to: str, subject: str, body_text: str, body_html: Optional[str] = None) -> bool:
        if not self.is_configured:
            logger.warning("Email not configured, skipping send to %s", to)
            return False

        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = formataddr((self.smtp.from_name, self.smtp.from_email or self.smtp.user))
        msg["To"] = to
        msg.attach(MIMEText(body_text, "plain"))
        if body_html:
            msg.attach(MIMEText(body_html, "html"))

        try:
            with smtplib.SMTP(self.smtp.host, self.smtp.port, timeout=30) as server:
                if self.smtp.use_tls:
                    server.starttls()
                server.login(self.smtp.user, self.smtp.password or "")
                server.send_message(msg)
            logger.info("Email sent to %s: %s", to, subject)
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP send failed to %s: %s", to, e)
            return False

    def send_password_reset_email(self, to: str, code: str) -> bool:
        minutes = settings.reset_code_expire_minutes
        text = (
            "You requested to reset your password.\n\n"
            f"Your verification code is: {code}\n\n"
            f"This code will expire in {minutes} minutes. Do not share it with anyone.\n"
            "If you didn't request this password reset, please ignore this email."
        )
        html = f"""
<html>
<body style="font-family: Arial, sans-serif; color: #333; max-width: 600px; margin: 0 auto;">
    <h2>Password Reset Request</h2>
    <p>Use the verification code below to proceed:</p>
    <div style="font-size: 32px; font-weight: bold; letter-spacing: 5px; text-align: center;">{code}</div>
    <p><strong>Important:</strong> This code will expire in {minutes} minutes.</p>
    <p>If you didn't request this password reset, please ignore this email.</p>
    <p style="color: #666; font-size: 14px;">&copy; {datetime.now().year} {self.smtp.from_name}</p>
</body>
</html>"""
        return self.send_email(to, f"Your Password Reset Code - {self.smtp.from_name}", text, html)


def get_email_service() -> EmailService:
    """FastAPI dependency; overridden in tests."""
    return EmailService()
