"""
Password hashing with bcrypt.

Only bcrypt hashes are accepted on verification; rows in any other format
(including legacy plaintext imports) never match.
"""

import bcrypt

from tasktracker.config import settings

BCRYPT_PREFIXES = ("$2a$", "$2b$", "$2y$")
# bcrypt only considers the first 72 bytes of the password
BCRYPT_MAX_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def get_password_hash(password: str, rounds: int | None = None) -> str:
    """Hash a plain text password using bcrypt."""
    salt = bcrypt.gensalt(rounds=rounds or settings.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_password_bytes(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    """Verify a plain text password against a stored hash. Never raises."""
    if not hashed_password or not hashed_password.startswith(BCRYPT_PREFIXES):
        return False
    try:
        return bcrypt.checkpw(_password_bytes(plain_password), hashed_password.encode("utf-8"))
    except (ValueError, TypeError):
        return False
