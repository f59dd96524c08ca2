"""Services for the Threadboard API."""

from threadboard.services.accounts import AccountService
from threadboard.services.counters import CounterLedger
from threadboard.services.moderation import ModerationService
from threadboard.services.notifications import NotificationRouter
from threadboard.services.posts import PostService
from threadboard.services.threads import ThreadQueries

__all__ = [
    "AccountService",
    "CounterLedger",
    "ModerationService",
    "NotificationRouter",
    "PostService",
    "ThreadQueries",
]
