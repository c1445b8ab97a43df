"""Security utilities for authentication and authorization."""
from .jwt_utils import (
    verify_password,
    get_password_hash,
    create_access_token,
    decode_access_token,
    verify_token,
)

__all__ = [
    "verify_password",
    "get_password_hash",
    "create_access_token",
    "decode_access_token",
    "verify_token",
]
