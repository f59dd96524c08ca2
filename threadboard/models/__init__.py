"""Database models for the Threadboard API."""

from threadboard.models.conf import Conf
from threadboard.models.counter import Count, CountKey
from threadboard.models.message import Message, MessageKey, MessageType
from threadboard.models.post import Post, PostType, ReplyView, ThreadView
from threadboard.models.user import Grade, User

__all__ = [
    "Conf",
    "Count",
    "CountKey",
    "Message",
    "MessageKey",
    "MessageType",
    "Post",
    "PostType",
    "ReplyView",
    "ThreadView",
    "Grade",
    "User",
]
