"""Authentication - password hashing, bearer tokens, password reset."""

from collegeadmin.auth.exceptions import InvalidTokenError, MailDeliveryError, TokenExpiredError
from collegeadmin.auth.mailer import DeliveryResult, PasswordResetMailer
from collegeadmin.auth.passwords import PasswordHasher
from collegeadmin.auth.reset_tokens import ResetTokenManager, hash_reset_token
from collegeadmin.auth.service import AuthResult, AuthService, ForgotPasswordResult
from collegeadmin.auth.tokens import TokenClaims, TokenIssuer

__all__ = [
    "AuthResult",
    "AuthService",
    "DeliveryResult",
    "ForgotPasswordResult",
    "InvalidTokenError",
    "MailDeliveryError",
    "PasswordHasher",
    "PasswordResetMailer",
    "ResetTokenManager",
    "TokenClaims",
    "TokenExpiredError",
    "TokenIssuer",
    "hash_reset_token",
]
