"""Credential Store - Persistent storage for admin and student accounts."""

from collegeadmin.credential_store.exceptions import (
    AccountExistsError,
    AccountNotFoundError,
    CredentialStoreError,
    ImageNotFoundError,
)
from collegeadmin.credential_store.models import (
    Account,
    AccountRef,
    Admin,
    Gender,
    ProfileImage,
    Role,
    Student,
    StudentPage,
    StudentStats,
    normalize_email,
)
from collegeadmin.credential_store.store import STUDENT_SORT_FIELDS, CredentialStore, utcnow

__all__ = [
    "STUDENT_SORT_FIELDS",
    "Account",
    "AccountExistsError",
    "AccountNotFoundError",
    "AccountRef",
    "Admin",
    "CredentialStore",
    "CredentialStoreError",
    "Gender",
    "ImageNotFoundError",
    "ProfileImage",
    "Role",
    "Student",
    "StudentPage",
    "StudentStats",
    "normalize_email",
    "utcnow",
]
