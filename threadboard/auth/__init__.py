"""Authentication utilities for the Threadboard API."""

from threadboard.auth.identity import Identity, is_admin
from threadboard.auth.jwt import create_access_token, decode_token
from threadboard.auth.password import hash_password, verify_password

__all__ = [
    "Identity",
    "is_admin",
    "hash_password",
    "verify_password",
    "create_access_token",
    "decode_token",
]
