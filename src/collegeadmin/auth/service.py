"""Authentication service.

Coordinates the credential store, the password hasher, the token issuer and
the reset-token manager. Login failures never reveal whether the email exists
or the password was wrong; the message is the same either way.

Admins and students are kept in separate tables. Password reset looks an email
up among admins first and falls back to students, so an address registered as
both resolves to the admin account.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from collegeadmin.auth.mailer import PasswordResetMailer
from collegeadmin.auth.reset_tokens import RESET_LOOKUP_ORDER, ResetTokenManager
from collegeadmin.auth.tokens import TokenIssuer
from collegeadmin.credential_store import Account, AccountRef, Role
from collegeadmin.errors import AuthenticationError, NotFoundError
from collegeadmin.logging import mask_email

if TYPE_CHECKING:
    from collegeadmin.auth.passwords import PasswordHasher
    from collegeadmin.config import Settings
    from collegeadmin.credential_store import CredentialStore

logger = logging.getLogger("collegeadmin.auth")

INVALID_CREDENTIALS = "Invalid credentials"
WRONG_CURRENT_PASSWORD = "Current password is incorrect"
ACCOUNT_NOT_FOUND = "No account found with this email"


@dataclass
class AuthResult:
    """Result of a successful registration or login."""

    id: str
    name: str
    email: str
    role: Role
    token: str


@dataclass
class ForgotPasswordResult:
    """Outcome of a reset request.

    ``reset_token`` is only populated in mail test mode, where no mail is sent.
    """

    sent: bool
    reset_url: str | None = None
    reset_token: str | None = None


class AuthService:
    """Service for admin and student authentication."""

    def __init__(
        self,
        store: CredentialStore,
        settings: Settings,
        issuer: TokenIssuer | None = None,
        reset_tokens: ResetTokenManager | None = None,
        mailer: PasswordResetMailer | None = None,
    ) -> None:
        """
        Initialize the auth service.

        Args:
            store: Credential store holding both account kinds.
            settings: Process configuration (secret, lifetimes, mail mode).
            issuer: Token issuer; built from settings if omitted.
            reset_tokens: Reset-token manager; built from settings if omitted.
            mailer: Reset mail sender; built from settings if omitted.
        """
        self._store = store
        self._settings = settings
        self._issuer = issuer or TokenIssuer(
            settings.jwt_secret,
            algorithm=settings.jwt_algorithm,
            ttl=settings.token_ttl,
        )
        self._reset_tokens = reset_tokens or ResetTokenManager(store, ttl=settings.reset_token_ttl)
        self._mailer = mailer or PasswordResetMailer(
            settings.mail,
            settings.frontend_url,
            ttl_minutes=int(settings.reset_token_ttl.total_seconds() // 60),
        )

    @property
    def issuer(self) -> TokenIssuer:
        return self._issuer

    @property
    def hasher(self) -> PasswordHasher:
        return self._store.hasher

    def _result(self, account: Account) -> AuthResult:
        token = self._issuer.issue(account.id, account.email, account.role)
        return AuthResult(
            id=account.id,
            name=account.name,
            email=account.email,
            role=account.role,
            token=token,
        )

    def _check_credentials(self, role: Role, email: str, password: str) -> Account:
        account = self._store.find_by_email(role, email)
        if account is None or not self.hasher.verify(password, account.password_hash):
            logger.info("Failed %s login for %s", role, mask_email(email))
            raise AuthenticationError(INVALID_CREDENTIALS)
        return account

    def register(self, name: str, email: str, password: str) -> AuthResult:
        """
        Register a new admin and log them in.

        Raises:
            AccountExistsError: If an admin with this email already exists.
        """
        admin = self._store.create_admin(name=name, email=email, password=password)
        logger.info("Registered admin %s", admin.id)
        return self._result(admin)

    def login(self, email: str, password: str) -> AuthResult:
        """
        Log an admin in and stamp their last login time.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        admin = self._check_credentials(Role.ADMIN, email, password)
        admin = self._store.record_admin_login(admin.id)
        logger.info("Admin %s logged in", admin.id)
        return self._result(admin)

    def student_login(self, email: str, password: str) -> AuthResult:
        """
        Log a student in. Students have no last-login tracking.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong.
        """
        student = self._check_credentials(Role.STUDENT, email, password)
        logger.info("Student %s logged in", student.id)
        return self._result(student)

    def find_reset_target(self, email: str) -> AccountRef:
        """
        Resolve which account a reset request for ``email`` applies to.

        Raises:
            NotFoundError: If neither an admin nor a student holds the email.
        """
        for role in RESET_LOOKUP_ORDER:
            account = self._store.find_by_email(role, email)
            if account is not None:
                return account.ref
        raise NotFoundError(ACCOUNT_NOT_FOUND)

    async def forgot_password(self, email: str) -> ForgotPasswordResult:
        """
        Issue a reset token for the account holding ``email`` and deliver it.

        In mail test mode nothing is sent and the token is returned instead.

        Raises:
            NotFoundError: If no account holds the email.
            MailDeliveryError: If the mail could not be sent.
        """
        ref = self.find_reset_target(email)
        token = self._reset_tokens.request_reset(ref)
        delivery = await self._mailer.send_password_reset(email, token)
        if delivery.sent:
            return ForgotPasswordResult(sent=True)
        return ForgotPasswordResult(sent=False, reset_url=delivery.reset_url, reset_token=token)

    def reset_password(self, token: str, new_password: str) -> AccountRef:
        """
        Consume a reset token and set a new password.

        Raises:
            AuthenticationError: If the token is wrong, expired, or already used.
        """
        return self._reset_tokens.consume_reset(token, new_password)

    def change_password(self, ref: AccountRef, current_password: str, new_password: str) -> None:
        """
        Change a signed-in account's password after re-checking the current one.

        Raises:
            AccountNotFoundError: If the account no longer exists.
            AuthenticationError: If ``current_password`` is wrong.
        """
        account = self._store.get_account(ref)
        if not self.hasher.verify(current_password, account.password_hash):
            raise AuthenticationError(WRONG_CURRENT_PASSWORD)
        self._store.change_password(ref, new_password)
        logger.info("Password changed for %s %s", ref.role, ref.id)
