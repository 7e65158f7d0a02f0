"""Custom exceptions for the Credential Store."""

from collegeadmin.errors import CollegeAdminError, ConflictError, NotFoundError


class CredentialStoreError(CollegeAdminError):
    """Base exception for Credential Store errors."""


class AccountNotFoundError(CredentialStoreError, NotFoundError):
    """Account with given ID does not exist."""


class AccountExistsError(CredentialStoreError, ConflictError):
    """Account with given email already exists."""


class ImageNotFoundError(CredentialStoreError, NotFoundError):
    """Account has no stored profile picture."""
