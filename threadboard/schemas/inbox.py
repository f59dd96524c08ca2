"""Inbox-related Pydantic schemas."""

from pydantic import BaseModel


class InboxSummaryResponse(BaseModel):
    """Response for inbox summary."""

    unread_count: int
    total_count: int


class NotificationItem(BaseModel):
    """Single reply notification."""

    pid: int
    tid: int
    replier_uid: int
    replier: str | None
    content: str
    time: int
    quote_pid: int | None
    quote_content: str | None
    unread: bool


class ListNotificationsResponse(BaseModel):
    """Response for listing notifications."""

    items: list[NotificationItem]
    next_before: int | None
    has_more: bool


class MarkReadResponse(BaseModel):
    """Response for marking one notification as read."""

    pid: int
    marked: bool


class MarkAllReadResponse(BaseModel):
    """Response for acknowledging the whole inbox."""

    last_read: int
