"""JWT token utilities for authentication."""
from datetime import datetime, timedelta
from typing import Optional

import bcrypt
from jose import JWTError, jwt

from fitcoach.config.settings import Settings, get_settings
from fitcoach.core.exceptions import ConfigurationError


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode('utf-8'), salt).decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against a hash."""
    try:
        return bcrypt.checkpw(
            plain_password.encode('utf-8'),
            hashed_password.encode('utf-8')
        )
    except ValueError:
        # Malformed stored hash
        return False


def _secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ConfigurationError("JWT_SECRET is not set")
    return settings.jwt_secret


def create_access_token(
    user_id: int,
    expires_delta: Optional[timedelta] = None,
    settings: Settings | None = None,
) -> str:
    """Create a signed session token.

    Args:
        user_id: User the token authenticates, stored as ``sub``
        expires_delta: Optional lifetime, defaults to the auth cookie TTL

    Returns:
        Encoded JWT token string
    """
    settings = settings or get_settings()
    lifetime = expires_delta or timedelta(seconds=settings.auth_token_ttl_seconds)
    to_encode = {
        "sub": str(user_id),
        "exp": datetime.utcnow() + lifetime,
    }
    return jwt.encode(to_encode, _secret(settings), algorithm=settings.jwt_algorithm)


def decode_access_token(token: str, settings: Settings | None = None) -> Optional[dict]:
    """Decode a JWT access token.

    Returns:
        Decoded token payload or None if invalid
    """
    settings = settings or get_settings()
    try:
        return jwt.decode(
            token,
            _secret(settings),
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        return None


def verify_token(token: str, settings: Settings | None = None) -> Optional[int]:
    """Verify a JWT token and extract the user ID.

    Returns:
        User ID if valid, None otherwise
    """
    payload = decode_access_token(token, settings)

    if payload is None:
        return None

    user_id = payload.get("sub")

    if user_id is None:
        return None

    try:
        return int(user_id)
    except (TypeError, ValueError):
        return None
