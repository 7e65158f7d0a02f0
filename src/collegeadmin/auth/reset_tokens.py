"""Single-use, time-boxed password reset tokens."""

from __future__ import annotations

import hashlib
import logging
import secrets
from collections.abc import Callable
from datetime import datetime, timedelta

from collegeadmin.credential_store import AccountRef, CredentialStore, Role, utcnow
from collegeadmin.errors import AuthenticationError

logger = logging.getLogger("collegeadmin.auth.reset_tokens")

DEFAULT_RESET_TTL = timedelta(hours=1)
TOKEN_BYTES = 32

INVALID_RESET_TOKEN = "Invalid or expired reset token"

# Admin wins when the same email exists in both tables
RESET_LOOKUP_ORDER = (Role.ADMIN, Role.STUDENT)


def hash_reset_token(token: str) -> str:
    """sha256 hex digest under which a reset token is stored."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class ResetTokenManager:
    """Issues reset tokens and consumes them exactly once.

    Only the sha256 digest of a token is persisted. An account is either
    without a pending reset or holds one digest plus its expiry; issuing a
    new token overwrites the previous one.
    """

    def __init__(
        self,
        store: CredentialStore,
        ttl: timedelta = DEFAULT_RESET_TTL,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._store = store
        self.ttl = ttl
        self._clock = clock

    def request_reset(self, ref: AccountRef) -> str:
        """Start a reset for an account.

        Args:
            ref: The account to reset.

        Returns:
            The plaintext token. The caller delivers it out-of-band and must
            not log it.
        """
        token = secrets.token_hex(TOKEN_BYTES)
        expires_at = self._clock() + self.ttl
        self._store.set_reset_token(ref, hash_reset_token(token), expires_at)
        logger.info("Reset token issued for %s %s (expires %s)", ref.role, ref.id, expires_at)
        return token

    def consume_reset(self, token: str, new_password: str) -> AccountRef:
        """Redeem a token and set a new password.

        Admin accounts are searched first, then students.

        Raises:
            AuthenticationError: If the token is unknown, expired, or already
                used. The three cases are indistinguishable.
        """
        token_hash = hash_reset_token(token)
        now = self._clock()
        for role in RESET_LOOKUP_ORDER:
            ref = self._store.consume_reset_token(role, token_hash, new_password, now)
            if ref is not None:
                logger.info("Password reset completed for %s %s", ref.role, ref.id)
                return ref

        logger.warning("Rejected password reset attempt")
        raise AuthenticationError(INVALID_RESET_TOKEN)
