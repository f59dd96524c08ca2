"""Authentication dependencies for FastAPI endpoints."""

from fastapi import Cookie, Depends, Header
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.identity import Identity
from threadboard.auth.jwt import decode_token
from threadboard.database import get_db
from threadboard.errors import Forbidden, Unauthenticated
from threadboard.models.user import Grade, User


def _extract_token(authorization: str | None, access_token: str | None) -> str | None:
    if authorization:
        scheme, _, token = authorization.partition(" ")
        if scheme.lower() == "bearer" and token:
            return token.strip()
        return None
    return access_token


async def load_identity(db: AsyncSession, uid: int) -> Identity | None:
    """Read the identity snapshot of a user; banned accounts have none."""
    result = await db.execute(
        select(User.uid, User.grade, User.last_time).where(
            User.uid == uid,
            User.grade > Grade.BANNED,
        )
    )
    row = result.one_or_none()
    if row is None:
        return None
    return Identity(uid=row.uid, grade=row.grade, last_time=row.last_time)


async def get_optional_identity(
    authorization: str | None = Header(default=None),
    access_token: str | None = Cookie(default=None),
    db: AsyncSession = Depends(get_db),
) -> Identity | None:
    """Resolve the caller from a bearer token or the session cookie, if any."""
    token = _extract_token(authorization, access_token)
    if not token:
        return None

    payload = decode_token(token)
    if not payload or payload.get("type") != "access":
        return None

    try:
        uid = int(payload.get("sub", ""))
    except ValueError:
        return None

    return await load_identity(db, uid)


async def get_current_identity(
    identity: Identity | None = Depends(get_optional_identity),
) -> Identity:
    """
    Require an authenticated caller.

    Raises:
        Unauthenticated: token missing, invalid, expired, or account banned
    """
    if identity is None:
        raise Unauthenticated()
    return identity


async def require_moderator(
    identity: Identity = Depends(get_current_identity),
) -> Identity:
    """Require a caller with moderator grade."""
    if not identity.elevated:
        raise Forbidden(message="Moderator access required")
    return identity
