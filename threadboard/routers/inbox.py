"""Inbox router for reply notifications."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.dependencies import get_current_identity
from threadboard.auth.identity import Identity
from threadboard.config import settings
from threadboard.database import atomic, get_db
from threadboard.errors import Gone
from threadboard.schemas.inbox import (
    InboxSummaryResponse,
    ListNotificationsResponse,
    MarkAllReadResponse,
    MarkReadResponse,
    NotificationItem,
)
from threadboard.services.clock import epoch_now
from threadboard.services.notifications import NotificationRouter

router = APIRouter(prefix="/api/v1/inbox", tags=["Inbox"])


# --- Inbox Summary ---


@router.get(
    "/summary",
    response_model=InboxSummaryResponse,
    status_code=status.HTTP_200_OK,
)
async def get_inbox_summary(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> InboxSummaryResponse:
    """Counts of unread and total reply notifications."""
    unread, total = await NotificationRouter(db).summary(identity.uid)
    return InboxSummaryResponse(unread_count=unread, total_count=total)


# --- List Notifications ---


@router.get(
    "/notifications",
    response_model=ListNotificationsResponse,
    status_code=status.HTTP_200_OK,
)
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
    before: int | None = Query(default=None, description="Only replies posted before this time"),
) -> ListNotificationsResponse:
    """
    List reply notifications, newest first.

    Pass the returned ``next_before`` to fetch the following page.
    """
    limit = settings.notification_page_size
    rows = await NotificationRouter(db).recent(identity.uid, limit + 1, before)

    has_more = len(rows) > limit
    if has_more:
        rows = rows[:limit]

    items = [
        NotificationItem(
            pid=row.pid,
            tid=row.tid,
            replier_uid=row.replier_uid,
            replier=row.replier_name,
            content=row.content,
            time=row.time,
            quote_pid=row.quote_pid,
            quote_content=row.quote_content,
            unread=bool(row.unread) and row.type > 0,
        )
        for row in rows
    ]

    next_before = rows[-1].time if rows and has_more else None
    return ListNotificationsResponse(items=items, next_before=next_before, has_more=has_more)


# --- Mark Read ---


@router.post(
    "/notifications/read-all",
    response_model=MarkAllReadResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_all_notifications_read(
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> MarkAllReadResponse:
    """Acknowledge every notification received so far."""
    now = epoch_now()
    async with atomic(db):
        await NotificationRouter(db).mark_all_read(identity.uid, now)
    return MarkAllReadResponse(last_read=now)


@router.post(
    "/notifications/{pid}/read",
    response_model=MarkReadResponse,
    status_code=status.HTTP_200_OK,
)
async def mark_notification_read(
    pid: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> MarkReadResponse:
    """Mark the notification for one reply as read."""
    async with atomic(db):
        marked = await NotificationRouter(db).mark_read(identity.uid, pid)
    return MarkReadResponse(pid=pid, marked=marked)


# --- Dismiss ---


@router.delete(
    "/notifications/{pid}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def dismiss_notification(
    pid: int,
    db: AsyncSession = Depends(get_db),
    identity: Identity = Depends(get_current_identity),
) -> None:
    """Remove the notification for one reply in both read states."""
    async with atomic(db):
        removed = await NotificationRouter(db).remove(identity.uid, pid)
    if not removed:
        raise Gone()
