"""Password hashing backed by bcrypt."""

from __future__ import annotations

import bcrypt

DEFAULT_ROUNDS = 10

# bcrypt only looks at the first 72 bytes of its input
_BCRYPT_MAX_BYTES = 72


def _encode(plaintext: str) -> bytes:
    return plaintext.encode("utf-8")[:_BCRYPT_MAX_BYTES]


class PasswordHasher:
    """Salted one-way hashing and verification of passwords."""

    def __init__(self, rounds: int = DEFAULT_ROUNDS) -> None:
        """
        Args:
            rounds: bcrypt cost factor (log2 of the iteration count).
        """
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt."""
        return bcrypt.hashpw(_encode(plaintext), bcrypt.gensalt(rounds=self.rounds)).decode("utf-8")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a stored digest.

        Raises:
            ValueError: If the digest is not a bcrypt hash.
        """
        return bcrypt.checkpw(_encode(plaintext), digest.encode("utf-8"))
