"""Reply notification model."""

from dataclasses import dataclass

from sqlalchemy import Column, Index, Integer

from threadboard.database import Base


class MessageType:
    """Notification states."""

    UNREAD_REPLY = 1
    READ_REPLY = -1


REPLY_STATES = (MessageType.READ_REPLY, MessageType.UNREAD_REPLY)


@dataclass(frozen=True)
class MessageKey:
    """(recipient, state, triggering reply) - the whole identity of a notification."""

    uid: int
    type: int
    pid: int


class Message(Base):
    """
    Reply notification.

    No surrogate id: a notification is found and
    removed again purely from the reply that created it.
    """

    __tablename__ = "messages"

    uid = Column(Integer, primary_key=True, autoincrement=False)
    type = Column(Integer, primary_key=True, autoincrement=False)
    pid = Column(Integer, primary_key=True, autoincrement=False)

    __table_args__ = (
        Index("idx_messages_pid", pid),
    )
