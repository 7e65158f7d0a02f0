"""Signed bearer tokens (HS256 JWT)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import ExpiredSignatureError, JWTError, jwt

from collegeadmin.auth.exceptions import InvalidTokenError, TokenExpiredError
from collegeadmin.credential_store import Role

logger = logging.getLogger("collegeadmin.auth.tokens")

DEFAULT_TOKEN_TTL = timedelta(days=1)

_REQUIRED_CLAIMS = ("id", "email", "role", "iat", "exp")


@dataclass(frozen=True)
class TokenClaims:
    """Identity decoded from a verified token."""

    id: str
    email: str
    role: Role
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """Issues and verifies self-contained bearer tokens.

    Tokens are signed with a process-wide secret; rotating the secret
    invalidates every outstanding token.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        ttl: timedelta = DEFAULT_TOKEN_TTL,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret must not be empty")
        self._secret = secret
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(
        self,
        account_id: str,
        email: str,
        role: Role,
        ttl: timedelta | None = None,
    ) -> str:
        """Sign a token for an account.

        Args:
            account_id: Account ID placed in the ``id`` claim.
            email: Account email.
            role: Account role.
            ttl: Lifetime override; defaults to the issuer's ttl (1 day).

        Returns:
            The compact JWT string.
        """
        issued_at = datetime.now(UTC)
        expires_at = issued_at + (ttl if ttl is not None else self.ttl)
        payload = {
            "id": account_id,
            "email": email,
            "role": Role(role).value,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> TokenClaims:
        """Verify signature and expiry and return the embedded identity.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: For any other problem with the token.
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except ExpiredSignatureError as e:
            raise TokenExpiredError("Token expired") from e
        except JWTError as e:
            logger.debug("Rejected bearer token: %s", e)
            raise InvalidTokenError("Invalid token") from e

        missing = [claim for claim in _REQUIRED_CLAIMS if claim not in payload]
        if missing:
            raise InvalidTokenError(f"Token is missing claims: {', '.join(missing)}")

        try:
            role = Role(payload["role"])
            issued_at = datetime.fromtimestamp(int(payload["iat"]), UTC)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), UTC)
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("Invalid token claims") from e

        return TokenClaims(
            id=str(payload["id"]),
            email=str(payload["email"]),
            role=role,
            issued_at=issued_at,
            expires_at=expires_at,
        )
