"""Unit tests for PasswordResetMailer."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from collegeadmin.auth import MailDeliveryError, PasswordResetMailer
from collegeadmin.config import MailSettings


@pytest.fixture
def smtp_settings() -> MailSettings:
    return MailSettings(
        host="smtp.college.test",
        port=2525,
        username="mailer",
        password="smtp-pass",
        from_address="noreply@college.test",
    )


@pytest.mark.unit
class TestResetUrl:
    """Tests for reset_url and build_message."""

    def test_reset_url(self, smtp_settings: MailSettings) -> None:
        """The link points at the frontend reset page."""
        mailer = PasswordResetMailer(smtp_settings, "http://frontend.test/")

        assert mailer.reset_url("abc123") == "http://frontend.test/reset-password?token=abc123"

    def test_message_headers_and_body(self, smtp_settings: MailSettings) -> None:
        """The message is addressed correctly and carries the link in both parts."""
        mailer = PasswordResetMailer(smtp_settings, "http://frontend.test", ttl_minutes=60)
        url = mailer.reset_url("abc123")

        message = mailer.build_message("ada@college.edu", url)

        assert message["To"] == "ada@college.edu"
        assert message["From"] == "noreply@college.test"
        assert message["Subject"] == "Password Reset Request"
        html = message.get_body(preferencelist=("html",)).get_content()
        text = message.get_body(preferencelist=("plain",)).get_content()
        assert url in html
        assert url in text
        assert "60 minutes" in html


@pytest.mark.unit
class TestSendPasswordReset:
    """Tests for send_password_reset."""

    @pytest.mark.asyncio
    async def test_test_mode_skips_smtp(self) -> None:
        """Nothing is sent in test mode."""
        mailer = PasswordResetMailer(MailSettings(test_mode=True), "http://frontend.test")

        with patch("collegeadmin.auth.mailer.aiosmtplib.send", new_callable=AsyncMock) as send:
            result = await mailer.send_password_reset("ada@college.edu", "abc123")

        send.assert_not_called()
        assert result.sent is False
        assert result.reset_url.endswith("token=abc123")

    @pytest.mark.asyncio
    async def test_sends_via_smtp(self, smtp_settings: MailSettings) -> None:
        """The configured SMTP server and credentials are used."""
        mailer = PasswordResetMailer(smtp_settings, "http://frontend.test")

        with patch("collegeadmin.auth.mailer.aiosmtplib.send", new_callable=AsyncMock) as send:
            result = await mailer.send_password_reset("ada@college.edu", "abc123")

        assert result.sent is True
        send.assert_awaited_once()
        kwargs = send.await_args.kwargs
        assert kwargs["hostname"] == "smtp.college.test"
        assert kwargs["port"] == 2525
        assert kwargs["username"] == "mailer"
        assert kwargs["password"] == "smtp-pass"
        assert kwargs["start_tls"] is True
        assert kwargs["use_tls"] is False

    @pytest.mark.asyncio
    async def test_smtp_failure_raises(self, smtp_settings: MailSettings) -> None:
        """SMTP errors surface as MailDeliveryError."""
        mailer = PasswordResetMailer(smtp_settings, "http://frontend.test")
        failure = aiosmtplib.SMTPException("connection refused")

        with (
            patch(
                "collegeadmin.auth.mailer.aiosmtplib.send",
                new_callable=AsyncMock,
                side_effect=failure,
            ),
            pytest.raises(MailDeliveryError) as exc_info,
        ):
            await mailer.send_password_reset("ada@college.edu", "abc123")

        assert exc_info.value.status_code == 500
