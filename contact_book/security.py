"""Password hashing and opaque session tokens."""

import secrets

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MAX_BCRYPT_LENGTH = 72
TOKEN_BYTES = 32


def get_password_hash(password: str) -> str:
    """Generate a salted bcrypt hash of ``password``."""
    return pwd_context.hash(password[:MAX_BCRYPT_LENGTH])


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Compare a plain password with its hashed value."""
    return pwd_context.verify(plain_password[:MAX_BCRYPT_LENGTH], hashed_password)


def generate_token() -> str:
    """Return a fresh high-entropy token with no embedded claims."""
    return secrets.token_urlsafe(TOKEN_BYTES)


def parse_bearer(header: str | None) -> str | None:
    """
    Extract the token from an ``Authorization`` header value.

    Returns ``None`` when the header is absent, uses another scheme, or
    carries an empty token.
    """
    if not header:
        return None
    scheme, _, token = header.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None
