"""Custom exceptions for authentication."""

from collegeadmin.errors import AuthenticationError, CollegeAdminError


class InvalidTokenError(AuthenticationError):
    """Bearer token is malformed, badly signed, or carries unusable claims."""


class TokenExpiredError(InvalidTokenError):
    """Bearer token is past its expiry."""


class MailDeliveryError(CollegeAdminError):
    """Password reset mail could not be handed to the SMTP server."""
