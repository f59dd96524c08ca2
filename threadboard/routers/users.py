"""Users router for the caller's own account."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.dependencies import get_current_identity
from threadboard.auth.identity import Identity
from threadboard.database import get_db
from threadboard.errors import ValidationFailed
from threadboard.schemas.users import (
    UpdateProfileRequest,
    UserMeResponse,
    mail_problem,
    name_problem,
)
from threadboard.services.accounts import AccountService

router = APIRouter(prefix="/api/v1/users", tags=["Users"])


async def _me(db: AsyncSession, uid: int) -> UserMeResponse:
    row = await AccountService(db).profile(uid)
    return UserMeResponse(
        uid=row.uid,
        mail=row.mail,
        name=row.name,
        grade=row.grade,
        credits=row.credits,
        golds=row.golds,
        time=row.time,
        last_time=row.last_time,
        last_read=row.last_read,
    )


@router.get(
    "/me",
    response_model=UserMeResponse,
    status_code=status.HTTP_200_OK,
)
async def get_me(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> UserMeResponse:
    """Get the current user's account and counters."""
    return await _me(db, identity.uid)


@router.patch(
    "/me",
    response_model=UserMeResponse,
    status_code=status.HTTP_200_OK,
)
async def update_me(
    data: UpdateProfileRequest,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> UserMeResponse:
    """
    Update mail, name and optionally the password.

    The current password must be supplied as ``password_confirm``.
    """
    problem = mail_problem(data.mail) or name_problem(data.name)
    if problem:
        raise ValidationFailed(problem)

    await AccountService(db).save_profile(
        identity.uid,
        mail=data.mail,
        name=data.name,
        password_confirm=data.password_confirm,
        new_password=data.password,
    )
    return await _me(db, identity.uid)
