import hashlib
import secrets

TOKEN_BYTES = 32


def digest_token(raw_token: str) -> str:
    """Storage key for a session token."""
    return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()


def generate_session_token() -> tuple[str, str]:
    """Return ``(raw_token, digest)``; only the digest is ever persisted."""
    raw_token = secrets.token_hex(TOKEN_BYTES)
    return raw_token, digest_token(raw_token)
