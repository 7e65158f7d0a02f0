"""FastAPI dependencies for dependency injection and request authorization."""

from __future__ import annotations

import logging
from collections.abc import Generator  # noqa: TC003
from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from collegeadmin.auth import AuthService, InvalidTokenError, PasswordHasher, TokenIssuer
from collegeadmin.config import Settings
from collegeadmin.credential_store import AccountRef, CredentialStore, Role
from collegeadmin.errors import AuthenticationError, AuthorizationError

logger = logging.getLogger("collegeadmin.api.auth")

NOT_AUTHORIZED = "Not authorized"
FORBIDDEN = "Not authorized to access this resource"

# Global instances (initialized on app startup)
_settings: Settings | None = None
_store: CredentialStore | None = None
_auth_service: AuthService | None = None


def init_services(settings: Settings) -> AuthService:
    """Initialize the global store and auth service from ``settings``."""
    global _settings, _store, _auth_service  # noqa: PLW0603
    _settings = settings
    _store = CredentialStore(settings.database_path, hasher=PasswordHasher(settings.bcrypt_rounds))
    _auth_service = AuthService(_store, settings)
    return _auth_service


def close_services() -> None:
    """Close the global store and drop the service instances."""
    global _settings, _store, _auth_service  # noqa: PLW0603
    if _store is not None:
        _store.close()
    _settings = None
    _store = None
    _auth_service = None


def get_settings() -> Generator[Settings, None, None]:
    """Dependency that provides the process settings."""
    if _settings is None:
        raise RuntimeError("Settings not initialized. Call init_services() first.")
    yield _settings


def get_store() -> Generator[CredentialStore, None, None]:
    """Dependency that provides the CredentialStore instance."""
    if _store is None:
        raise RuntimeError("CredentialStore not initialized. Call init_services() first.")
    yield _store


def get_auth_service() -> Generator[AuthService, None, None]:
    """Dependency that provides the AuthService instance."""
    if _auth_service is None:
        raise RuntimeError("AuthService not initialized. Call init_services() first.")
    yield _auth_service


def get_token_issuer(auth: Annotated[AuthService, Depends(get_auth_service)]) -> TokenIssuer:
    """Dependency that provides the issuer used to verify bearer tokens."""
    return auth.issuer


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
StoreDep = Annotated[CredentialStore, Depends(get_store)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
TokenIssuerDep = Annotated[TokenIssuer, Depends(get_token_issuer)]


@dataclass(frozen=True)
class Identity:
    """The verified caller of a request."""

    id: str
    email: str
    role: Role

    @property
    def ref(self) -> AccountRef:
        return AccountRef(self.role, self.id)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


bearer_scheme = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    issuer: TokenIssuerDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> Identity:
    """Verify the bearer token and attach the caller to ``request.state``.

    Raises:
        AuthenticationError: If the header is missing or the token does not verify.
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(NOT_AUTHORIZED)
    try:
        claims = issuer.verify(credentials.credentials)
    except InvalidTokenError as e:
        logger.info("Rejected bearer token on %s: %s", request.url.path, e.message)
        raise AuthenticationError(NOT_AUTHORIZED) from e

    identity = Identity(id=claims.id, email=claims.email, role=claims.role)
    request.state.identity = identity
    return identity


CurrentIdentity = Annotated[Identity, Depends(get_current_identity)]


def require_admin(identity: CurrentIdentity) -> Identity:
    """Allow only admin callers."""
    if identity.role is not Role.ADMIN:
        raise AuthorizationError(FORBIDDEN)
    return identity


def require_student(identity: CurrentIdentity) -> Identity:
    """Allow only student callers."""
    if identity.role is not Role.STUDENT:
        raise AuthorizationError(FORBIDDEN)
    return identity


AdminIdentity = Annotated[Identity, Depends(require_admin)]
StudentIdentity = Annotated[Identity, Depends(require_student)]


def ensure_self_or_admin(identity: Identity, target_id: str) -> None:
    """Students may only address their own record; admins may address any.

    Raises:
        AuthorizationError: If a student targets another student's id.
    """
    if identity.is_admin:
        return
    if identity.id != target_id:
        raise AuthorizationError(FORBIDDEN)
