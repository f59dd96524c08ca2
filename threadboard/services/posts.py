"""
Post store: thread and reply mutations.

Each compound write (post + counters + author credits) runs inside one
``atomic`` block. Notification side effects run afterwards in their own
transaction and are allowed to fail without undoing the post.
"""

import logging
from dataclasses import dataclass

from sqlalchemy import case, func, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from threadboard.auth.identity import Identity, is_admin
from threadboard.config import settings
from threadboard.database import atomic
from threadboard.errors import (
    ContentTooShort,
    Forbidden,
    Gone,
    NotFound,
    PersistenceFailure,
    RateLimited,
    ThreadLocked,
)
from threadboard.models.counter import CountKey
from threadboard.models.message import REPLY_STATES
from threadboard.models.post import (
    ACTIVE_TYPES,
    VISIBLE_TYPES,
    Post,
    PostType,
    ReplyView,
    ThreadView,
)
from threadboard.models.user import User
from threadboard.services.clock import epoch_now
from threadboard.services.content_filter import ContentFilter, PlainTextFilter
from threadboard.services.counters import CounterLedger
from threadboard.services.notifications import NotificationRouter, best_effort

logger = logging.getLogger(__name__)

THREAD_REWARD = 2
REPLY_REWARD = 1


@dataclass(frozen=True)
class DeletedPost:
    """What a successful soft delete removed."""

    pid: int
    tid: int
    uid: int
    quoted_pid: int

    @property
    def was_root(self) -> bool:
        return self.tid == 0


def thread_of(post_table):
    """SQL expression for the root pid owning a post (itself when it is a root)."""
    return case((post_table.tid == 0, post_table.pid), else_=post_table.tid)


def refresh_last_activity(tid: int):
    """
    UPDATE pointing a root's last activity at its newest visible reply.

    With no visible reply left the root falls back to its own creation time
    and no replier.
    """
    Reply = aliased(Post, name="latest")
    latest = (
        select(Reply.time, Reply.uid)
        .where(Reply.type.in_(VISIBLE_TYPES), Reply.tid == tid)
        .order_by(Reply.time.desc(), Reply.pid.desc())
        .limit(1)
    )
    return (
        update(Post)
        .where(Post.pid == tid)
        .values(
            sort=func.coalesce(latest.with_only_columns(Reply.time).scalar_subquery(), Post.time),
            clue=func.coalesce(latest.with_only_columns(Reply.uid).scalar_subquery(), 0),
        )
        .execution_options(synchronize_session=False)
    )


def adjust_rewards(uid: int, delta: int, **values):
    """UPDATE moving a user's credits and golds by ``delta``."""
    return (
        update(User)
        .where(User.uid == uid)
        .values(
            credits=User.credits + delta,
            golds=User.golds + delta,
            **values,
        )
        .execution_options(synchronize_session=False)
    )


class PostService:
    """Creates, edits and soft-deletes threads and replies."""

    def __init__(
        self,
        db: AsyncSession,
        content_filter: ContentFilter | None = None,
    ):
        self.db = db
        self.content_filter = content_filter or PlainTextFilter()
        self.counters = CounterLedger(db)
        self.notifications = NotificationRouter(db)

    # --- Validation ---

    def _clean(self, raw: str) -> str:
        content, length = self.content_filter.sanitize(raw)
        if length < settings.min_content_length:
            raise ContentTooShort()
        return content

    def _check_interval(self, author: Identity, now: int) -> None:
        if now - author.last_time < settings.post_interval_seconds:
            raise RateLimited()

    def _check_voice(self, author: Identity) -> None:
        if author.muted:
            raise Forbidden("muted", "Account is muted")

    async def _record_post(self, author: Identity, reward: int, now: int) -> None:
        """Reward the author and stamp ``last_time``, failing if a racing post got there first."""
        result = await self.db.execute(
            adjust_rewards(author.uid, reward, last_time=now).where(
                User.last_time <= now - settings.post_interval_seconds
            )
        )
        if not result.rowcount:
            raise RateLimited()

    # --- Creation ---

    async def create_thread(
        self, author: Identity, raw: str, *, now: int | None = None
    ) -> ThreadView:
        """Open a new thread."""
        now = epoch_now() if now is None else now
        self._check_voice(author)
        self._check_interval(author, now)
        content = self._clean(raw)

        async with atomic(self.db):
            result = await self.db.execute(
                insert(Post)
                .values(tid=0, uid=author.uid, sort=now, clue=0, time=now, content=content)
                .returning(Post.pid)
            )
            pid = result.scalar_one_or_none()
            if not pid:
                raise PersistenceFailure()
            await self.counters.adjust_many(
                [CountKey.author(author.uid), CountKey.everything()], 1
            )
            await self._record_post(author, THREAD_REWARD, now)

        logger.info("thread %s created by user %s", pid, author.uid)
        return ThreadView(pid=pid, last_activity=now, last_replier_uid=0)

    async def create_reply(
        self,
        author: Identity,
        quoted_pid: int,
        raw: str,
        *,
        now: int | None = None,
    ) -> ReplyView:
        """Reply to ``quoted_pid`` (a root or a reply)."""
        now = epoch_now() if now is None else now
        self._check_voice(author)
        self._check_interval(author, now)

        Thread = aliased(Post, name="thread")
        result = await self.db.execute(
            select(
                Post.pid,
                Post.uid,
                Thread.pid.label("tid"),
                Thread.last_activity.label("last_activity"),
            )
            .join(Thread, Thread.pid == thread_of(Post))
            .where(
                Post.pid == quoted_pid,
                Post.type.in_(ACTIVE_TYPES),
                Thread.type.in_(ACTIVE_TYPES),
            )
        )
        quote = result.one_or_none()
        if quote is None:
            raise NotFound()
        if now > quote.last_activity + settings.reply_window_seconds:
            raise ThreadLocked()
        content = self._clean(raw)

        async with atomic(self.db):
            result = await self.db.execute(
                insert(Post)
                # reply: post time, quoted pid
                .values(
                    tid=quote.tid,
                    uid=author.uid,
                    sort=now,
                    clue=quote.pid,
                    time=now,
                    content=content,
                )
                .returning(Post.pid)
            )
            pid = result.scalar_one_or_none()
            if not pid:
                raise PersistenceFailure()
            await self.db.execute(
                update(Post)
                .where(Post.pid == quote.tid)
                # root: last activity, last replier
                .values(sort=now, clue=author.uid)
                .execution_options(synchronize_session=False)
            )
            await self.counters.adjust(CountKey.thread(quote.tid), 1)
            await self._record_post(author, REPLY_REWARD, now)

        logger.info("reply %s in thread %s created by user %s", pid, quote.tid, author.uid)
        if author.uid != quote.uid:
            await best_effort(self.db, self.notifications.add, quote.uid, pid)
        return ReplyView(pid=pid, tid=quote.tid, post_time=now, quoted_pid=quote.pid)

    # --- Editing ---

    def _editable(self, caller: Identity, now: int):
        return (
            Post.type.in_(ACTIVE_TYPES),
            is_admin(caller, owner=Post.uid == caller.uid),
            is_admin(caller, owner=Post.time + settings.edit_window_seconds > now),
        )

    async def edit_source(self, caller: Identity, pid: int, *, now: int | None = None) -> str:
        """Stored content of a post the caller is allowed to edit."""
        now = epoch_now() if now is None else now
        result = await self.db.execute(
            select(Post.content).where(Post.pid == pid, *self._editable(caller, now))
        )
        content = result.scalar_one_or_none()
        if content is None:
            raise Forbidden()
        return content

    async def edit(self, caller: Identity, pid: int, raw: str, *, now: int | None = None) -> int:
        """Replace a post's content; authors lose the right after the edit window."""
        now = epoch_now() if now is None else now
        content = self._clean(raw)

        async with atomic(self.db):
            result = await self.db.execute(
                update(Post)
                .where(Post.pid == pid, *self._editable(caller, now))
                .values(content=content)
                .returning(Post.pid)
                .execution_options(synchronize_session=False)
            )
            edited = result.scalar_one_or_none()
            if edited is None:
                raise Forbidden()

        return edited

    # --- Deletion ---

    async def soft_delete(self, caller: Identity, pid: int) -> DeletedPost:
        """Mark a thread or reply deleted and unwind what it contributed."""
        async with atomic(self.db):
            result = await self.db.execute(
                update(Post)
                .where(
                    Post.pid == pid,
                    Post.type.in_(ACTIVE_TYPES),
                    is_admin(caller, owner=Post.uid == caller.uid),
                )
                .values(type=PostType.DELETED)
                .returning(Post.pid, Post.tid, Post.uid, Post.clue)
                .execution_options(synchronize_session=False)
            )
            row = result.one_or_none()
            if row is None:
                raise Gone()
            deleted = DeletedPost(pid=row.pid, tid=row.tid, uid=row.uid, quoted_pid=row.clue)

            if deleted.was_root:
                await self.counters.adjust_many(
                    [CountKey.author(deleted.uid), CountKey.everything()], -1
                )
                await self.db.execute(adjust_rewards(deleted.uid, -THREAD_REWARD))
            else:
                await self.db.execute(refresh_last_activity(deleted.tid))
                await self.counters.adjust(CountKey.thread(deleted.tid), -1)
                await self.db.execute(adjust_rewards(deleted.uid, -REPLY_REWARD))

        logger.info("post %s deleted by user %s", deleted.pid, caller.uid)
        if deleted.was_root:
            await best_effort(self.db, self._retract_thread_notifications, deleted.pid)
        else:
            await best_effort(self.db, self._retract_reply_notification, deleted)
        return deleted

    async def _retract_thread_notifications(self, tid: int) -> None:
        Quote = aliased(Post, name="quote")
        result = await self.db.execute(
            select(Post.pid, Quote.uid.label("quote_uid"))
            .join(Quote, Quote.pid == Post.clue)
            .where(
                Post.tid == tid,
                Post.uid != Quote.uid,
            )
        )
        for row in result.all():
            await self.notifications.remove(row.quote_uid, row.pid, REPLY_STATES)

    async def _retract_reply_notification(self, deleted: DeletedPost) -> None:
        result = await self.db.execute(
            select(Post.uid).where(Post.pid == deleted.quoted_pid)
        )
        quote_uid = result.scalar_one_or_none()
        if quote_uid is not None and quote_uid != deleted.uid:
            await self.notifications.remove(quote_uid, deleted.pid, REPLY_STATES)
