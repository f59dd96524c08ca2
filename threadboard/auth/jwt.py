"""JWT session tokens."""

from datetime import datetime, timedelta, timezone

from jose import jwt

from threadboard.config import settings


def create_access_token(uid: int) -> str:
    """Create a signed session token for a user id."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": str(uid),
        "exp": expire,
        "type": "access",
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")


def decode_token(token: str) -> dict | None:
    """
    Decode and validate a JWT token.

    Returns the payload if valid, None if invalid or expired.
    """
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
    except jwt.JWTError:
        return None
