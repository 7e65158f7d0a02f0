"""Delivery of password reset links over SMTP."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from email.message import EmailMessage
from urllib.parse import urlencode

import aiosmtplib

from collegeadmin.auth.exceptions import MailDeliveryError
from collegeadmin.config import MailSettings
from collegeadmin.logging import mask_email

logger = logging.getLogger("collegeadmin.auth.mailer")

RESET_SUBJECT = "Password Reset Request"

RESET_TEMPLATE = """\
<h1>Password Reset Request</h1>
<p>You requested a password reset. Click the link below to reset your password:</p>
<a href="{reset_url}">Reset Password</a>
<p>If you didn't request this, please ignore this email.</p>
<p>This link will expire in {minutes} minutes.</p>
"""


@dataclass
class DeliveryResult:
    """Outcome of a reset mail attempt."""

    sent: bool
    reset_url: str


class PasswordResetMailer:
    """Sends reset links, or skips sending when mail test mode is on."""

    def __init__(self, settings: MailSettings, frontend_url: str, ttl_minutes: int = 60) -> None:
        self._settings = settings
        self._frontend_url = frontend_url.rstrip("/")
        self._ttl_minutes = ttl_minutes

    @property
    def test_mode(self) -> bool:
        return self._settings.test_mode

    def reset_url(self, token: str) -> str:
        """Frontend URL that lets the user pick a new password."""
        return f"{self._frontend_url}/reset-password?{urlencode({'token': token})}"

    def build_message(self, email: str, reset_url: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._settings.from_address
        message["To"] = email
        message["Subject"] = RESET_SUBJECT
        message.set_content(
            f"Reset your password: {reset_url}\nThis link will expire in "
            f"{self._ttl_minutes} minutes."
        )
        message.add_alternative(
            RESET_TEMPLATE.format(reset_url=reset_url, minutes=self._ttl_minutes),
            subtype="html",
        )
        return message

    async def send_password_reset(self, email: str, token: str) -> DeliveryResult:
        """Deliver the reset link for ``token`` to ``email``.

        Returns:
            DeliveryResult with ``sent=False`` in test mode.

        Raises:
            MailDeliveryError: If the SMTP exchange fails.
        """
        url = self.reset_url(token)
        if self.test_mode:
            logger.info("Mail test mode: skipping reset mail to %s", mask_email(email))
            return DeliveryResult(sent=False, reset_url=url)

        message = self.build_message(email, url)
        try:
            await aiosmtplib.send(
                message,
                hostname=self._settings.host,
                port=self._settings.port,
                username=self._settings.username or None,
                password=self._settings.password or None,
                use_tls=self._settings.use_tls,
                start_tls=self._settings.start_tls and not self._settings.use_tls,
            )
        except aiosmtplib.SMTPException as e:
            logger.error("Failed to send reset mail to %s: %s", mask_email(email), e)
            raise MailDeliveryError("Failed to send password reset email") from e

        logger.info("Sent reset mail to %s", mask_email(email))
        return DeliveryResult(sent=True, reset_url=url)
