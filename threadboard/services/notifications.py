"""Reply notifications addressed by their natural key."""

import logging
from collections.abc import Awaitable, Callable, Iterable

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from threadboard.database import atomic, dialect_name
from threadboard.models.message import REPLY_STATES, Message, MessageKey, MessageType
from threadboard.models.post import VISIBLE_TYPES, Post
from threadboard.models.user import User

logger = logging.getLogger(__name__)

_INSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class NotificationRouter:
    """Creates, retracts and lists reply notifications."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, recipient: int, pid: int) -> MessageKey:
        """Record an unread notification; adding an existing key changes nothing."""
        key = MessageKey(uid=recipient, type=MessageType.UNREAD_REPLY, pid=pid)
        insert = _INSERT_DIALECTS[dialect_name(self.db)]
        await self.db.execute(
            insert(Message)
            .values(uid=key.uid, type=key.type, pid=key.pid)
            .on_conflict_do_nothing()
        )
        return key

    async def remove(
        self,
        recipient: int,
        pid: int,
        states: Iterable[int] = REPLY_STATES,
    ) -> int:
        """Delete the notification for ``pid`` in each of ``states``. Returns rows removed."""
        result = await self.db.execute(
            delete(Message)
            .where(
                Message.uid == recipient,
                Message.type.in_([int(state) for state in states]),
                Message.pid == pid,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount or 0

    async def mark_read(self, recipient: int, pid: int) -> bool:
        """Move one notification from the unread to the read state."""
        result = await self.db.execute(
            update(Message)
            .where(
                Message.uid == recipient,
                Message.type == MessageType.UNREAD_REPLY,
                Message.pid == pid,
            )
            .values(type=MessageType.READ_REPLY)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    async def mark_all_read(self, recipient: int, now: int) -> None:
        """Acknowledge everything up to ``now`` with one write to the recipient row."""
        await self.db.execute(
            update(User)
            .where(User.uid == recipient)
            .values(last_read=now)
            .execution_options(synchronize_session=False)
        )

    def _listing(self, recipient: int):
        Reply = aliased(Post, name="reply")
        Quote = aliased(Post, name="quote")
        Replier = aliased(User, name="replier")
        Recipient = aliased(User, name="recipient")
        return (
            select(
                Message.pid,
                Message.type,
                Reply.tid,
                Reply.time,
                Reply.content,
                Reply.uid.label("replier_uid"),
                Replier.name.label("replier_name"),
                Quote.pid.label("quote_pid"),
                Quote.content.label("quote_content"),
                (Reply.time > Recipient.last_read).label("unread"),
            )
            .join(Reply, Reply.pid == Message.pid)
            .join(Recipient, Recipient.uid == Message.uid)
            .outerjoin(Replier, Replier.uid == Reply.uid)
            .outerjoin(Quote, Quote.pid == Reply.clue)
            .where(
                Message.uid == recipient,
                Reply.type.in_(VISIBLE_TYPES),
            )
        ), Reply

    async def recent(self, recipient: int, limit: int, before: int | None = None) -> list:
        """Newest notifications first; ``before`` pages by reply time."""
        query, Reply = self._listing(recipient)
        if before:
            query = query.where(Reply.time < before)
        query = query.order_by(Reply.time.desc(), Reply.pid.desc()).limit(limit)
        result = await self.db.execute(query)
        return list(result.all())

    async def summary(self, recipient: int) -> tuple[int, int]:
        """(unread, total) notification counts for the recipient."""
        query, Reply = self._listing(recipient)
        counted = query.subquery()
        result = await self.db.execute(
            select(
                func.count().filter(
                    and_(
                        counted.c.unread,
                        counted.c.type == MessageType.UNREAD_REPLY,
                    )
                ),
                func.count(),
            ).select_from(counted)
        )
        unread, total = result.one()
        return unread or 0, total or 0


async def best_effort(db: AsyncSession, action: Callable[..., Awaitable[object]], *args) -> bool:
    """
    Run a notification side effect in its own transaction.

    Failures are logged and swallowed; the primary mutation has already been
    committed and is not affected. Nothing is retried.
    """
    try:
        async with atomic(db):
            await action(*args)
    except SQLAlchemyError:
        logger.exception("notification side effect %s%r failed", action.__name__, args)
        return False
    return True
