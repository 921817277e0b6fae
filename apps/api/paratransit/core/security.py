"""Security utilities for JWT session tokens and password hashing."""

import bcrypt
import jwt

from paratransit.core.config import settings


# =============================================================================
# Session Token (JWT in cookie or Authorization header)
# =============================================================================

SYSTEM_SCOPE = "system"


def decode_session_token(token: str) -> dict:
    """
    Decode and verify session JWT.

    Tries current secret first, then previous (for rotation support).
    Tokens are issued by the identity service; this API only verifies them.

    Raises:
        jwt.InvalidTokenError: If token invalid with all secrets
    """
    last_error = None
    for secret in settings.jwt_secrets:
        try:
            return jwt.decode(token, secret, algorithms=["HS256"])
        except jwt.InvalidTokenError as e:
            last_error = e
            continue
    raise last_error  # type: ignore


def is_system_token(payload: dict) -> bool:
    """Check whether a decoded payload belongs to a platform (system) user."""
    return payload.get("scope") == SYSTEM_SCOPE


# =============================================================================
# Password Hashing
# =============================================================================

BCRYPT_ROUNDS = 12
BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password with bcrypt.

    Raises:
        ValueError: If the password is longer than bcrypt's 72-byte input limit
    """
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("ascii")


def verify_password(password: str, hashed: str | None) -> bool:
    """Check a password against a stored bcrypt hash; unknown formats never match."""
    if not hashed:
        return False
    encoded = password.encode("utf-8")
    if len(encoded) > BCRYPT_MAX_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, hashed.encode("ascii"))
    except ValueError:
        return False
