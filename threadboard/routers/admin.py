"""Admin router for moderation actions."""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.dependencies import require_moderator
from threadboard.auth.identity import Identity
from threadboard.database import get_db
from threadboard.models.user import Grade
from threadboard.schemas.admin import BanResponse, MuteResponse
from threadboard.services.moderation import ModerationService

router = APIRouter(prefix="/api/v1/admin", tags=["Admin"])


@router.post(
    "/users/{uid}/mute",
    response_model=MuteResponse,
    status_code=status.HTTP_200_OK,
)
async def toggle_mute(
    uid: int,
    db: AsyncSession = Depends(get_db),
    moderator: Identity = Depends(require_moderator),
) -> MuteResponse:
    """
    Mute a user, or unmute them if already muted.

    Requires moderator grade. Privileged users cannot be muted.
    """
    grade = await ModerationService(db).toggle_mute(moderator, uid)
    return MuteResponse(uid=uid, grade=grade)


@router.post(
    "/users/{uid}/ban",
    response_model=BanResponse,
    status_code=status.HTTP_200_OK,
)
async def ban_user(
    uid: int,
    db: AsyncSession = Depends(get_db),
    moderator: Identity = Depends(require_moderator),
) -> BanResponse:
    """
    Ban a user permanently and take down their threads and replies.

    Requires moderator grade. Privileged users cannot be banned.
    """
    snapshot = await ModerationService(db).ban(moderator, uid)
    return BanResponse(
        uid=uid,
        grade=Grade.BANNED,
        threads_removed=len(snapshot.thread_pids),
        replies_removed=len(snapshot.quoted_replies),
    )
