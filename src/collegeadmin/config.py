"""Configuration loading for the College Admin API."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import timedelta

ENV_PREFIX = "COLLEGEADMIN_"

PRODUCTION = "production"

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(Exception):
    """Raised when configuration is invalid or missing."""


@dataclass
class MailSettings:
    """SMTP transport used for password reset mail.

    With ``test_mode`` enabled nothing is sent and the reset token is handed
    back to the caller instead.
    """

    host: str = "localhost"
    port: int = 587
    username: str = ""
    password: str = ""
    use_tls: bool = False
    start_tls: bool = True
    from_address: str = "no-reply@college-admin.local"
    test_mode: bool = False


@dataclass
class Settings:
    """Process-wide settings passed explicitly to every component."""

    jwt_secret: str
    environment: str = "development"
    database_path: str = "collegeadmin.db"
    jwt_algorithm: str = "HS256"
    token_ttl: timedelta = field(default_factory=lambda: timedelta(days=1))
    reset_token_ttl: timedelta = field(default_factory=lambda: timedelta(hours=1))
    bcrypt_rounds: int = 10
    frontend_url: str = "http://localhost:5173"
    max_upload_bytes: int = 5 * 1024 * 1024
    mail: MailSettings = field(default_factory=MailSettings)

    def __post_init__(self) -> None:
        self.validate()

    @property
    def is_production(self) -> bool:
        """Whether the service runs with production semantics."""
        return self.environment.lower() == PRODUCTION

    def validate(self) -> None:
        """Check invariants between fields.

        Raises:
            ConfigError: If the settings are unusable.
        """
        if not self.jwt_secret:
            raise ConfigError("JWT secret is required")
        if self.is_production and self.mail.test_mode:
            raise ConfigError("Mail test mode cannot be enabled in production")
        if not 4 <= self.bcrypt_rounds <= 31:
            raise ConfigError(f"bcrypt rounds must be between 4 and 31, got {self.bcrypt_rounds}")
        if self.token_ttl <= timedelta(0) or self.reset_token_ttl <= timedelta(0):
            raise ConfigError("Token lifetimes must be positive")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from ``COLLEGEADMIN_*`` environment variables.

        Args:
            environ: Mapping to read from. Defaults to ``os.environ``.

        Returns:
            Parsed settings.

        Raises:
            ConfigError: If a required variable is missing or a value is invalid.
        """
        env = os.environ if environ is None else environ

        def get(name: str, default: str | None = None) -> str | None:
            return env.get(f"{ENV_PREFIX}{name}", default)

        secret = get("JWT_SECRET")
        if not secret:
            raise ConfigError(f"Missing required environment variable: {ENV_PREFIX}JWT_SECRET")

        try:
            mail = MailSettings(
                host=get("SMTP_HOST", "localhost") or "localhost",
                port=int(get("SMTP_PORT", "587") or 587),
                username=get("SMTP_USER", "") or "",
                password=get("SMTP_PASSWORD", "") or "",
                use_tls=_parse_bool(get("SMTP_USE_TLS"), default=False),
                start_tls=_parse_bool(get("SMTP_START_TLS"), default=True),
                from_address=get("MAIL_FROM", MailSettings.from_address) or MailSettings.from_address,
                test_mode=_parse_bool(get("MAIL_TEST_MODE"), default=False),
            )
            return cls(
                jwt_secret=secret,
                environment=get("ENV", "development") or "development",
                database_path=get("DB_PATH", "collegeadmin.db") or "collegeadmin.db",
                token_ttl=timedelta(seconds=int(get("TOKEN_TTL_SECONDS", "86400") or 86400)),
                reset_token_ttl=timedelta(
                    seconds=int(get("RESET_TOKEN_TTL_SECONDS", "3600") or 3600)
                ),
                bcrypt_rounds=int(get("BCRYPT_ROUNDS", "10") or 10),
                frontend_url=(get("FRONTEND_URL", "http://localhost:5173") or "").rstrip("/"),
                max_upload_bytes=int(get("MAX_UPLOAD_BYTES", str(5 * 1024 * 1024)) or 0),
                mail=mail,
            )
        except ValueError as e:
            raise ConfigError(f"Invalid configuration value: {e}") from e


def _parse_bool(value: str | None, default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES
