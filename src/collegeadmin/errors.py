"""Error taxonomy shared by every component.

Each error carries the HTTP status it maps to; the API layer turns any of them
into the standard error envelope.
"""

from __future__ import annotations


class CollegeAdminError(Exception):
    """Base exception for College Admin errors."""

    status_code = 500

    def __init__(self, message: str = "Internal server error") -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CollegeAdminError):
    """Malformed or missing input."""

    status_code = 400

    def __init__(
        self,
        message: str = "Validation error",
        errors: list[dict[str, str]] | None = None,
    ) -> None:
        super().__init__(message)
        self.errors = errors or []


class AuthenticationError(CollegeAdminError):
    """Bad credentials, bad bearer token, or bad/expired reset token."""

    status_code = 401


class AuthorizationError(CollegeAdminError):
    """Role or ownership violation."""

    status_code = 403


class NotFoundError(CollegeAdminError):
    """Requested resource does not exist."""

    status_code = 404


class ConflictError(CollegeAdminError):
    """Uniqueness violation."""

    status_code = 409
