"""Moderation: mute toggling and the ban cascade."""

import logging
from collections import Counter
from dataclasses import dataclass, field

from sqlalchemy import case, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.identity import Identity
from threadboard.database import atomic
from threadboard.errors import Forbidden, Gone
from threadboard.models.counter import CountKey
from threadboard.models.message import REPLY_STATES
from threadboard.models.post import ACTIVE_TYPES, Post, PostType
from threadboard.models.user import Grade, User
from threadboard.services.counters import CounterLedger
from threadboard.services.notifications import NotificationRouter, best_effort
from threadboard.services.posts import refresh_last_activity

logger = logging.getLogger(__name__)


@dataclass
class BanSnapshot:
    """Target content captured before the cascade rewrites any post row."""

    thread_pids: list[int] = field(default_factory=list)
    replies_elsewhere: Counter = field(default_factory=Counter)
    quoted_replies: list[tuple[int, int]] = field(default_factory=list)


class ModerationService:
    """Applies mute and ban decisions made by moderators."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.counters = CounterLedger(db)
        self.notifications = NotificationRouter(db)

    @staticmethod
    def _require_moderator(moderator: Identity) -> None:
        if not moderator.elevated:
            raise Forbidden(message="Moderator access required")

    async def toggle_mute(self, moderator: Identity, target_uid: int) -> int:
        """
        Mute a normal user, or unmute a muted one. Returns the new grade.

        Privileged accounts (grade >= 1) cannot be targeted and report Gone.
        """
        self._require_moderator(moderator)
        async with atomic(self.db):
            result = await self.db.execute(
                update(User)
                .where(User.uid == target_uid, User.grade < Grade.PRIVILEGED)
                .values(
                    grade=case(
                        (User.grade != Grade.MUTED, Grade.MUTED),
                        else_=Grade.NORMAL,
                    )
                )
                .returning(User.grade)
                .execution_options(synchronize_session=False)
            )
            grade = result.scalar_one_or_none()
            if grade is None:
                raise Gone()

        logger.info("user %s grade set to %s by moderator %s", target_uid, grade, moderator.uid)
        return grade

    async def _snapshot(self, target_uid: int) -> BanSnapshot:
        snapshot = BanSnapshot()

        result = await self.db.execute(
            select(Post.pid).where(
                Post.type.in_(ACTIVE_TYPES),
                Post.uid == target_uid,
                Post.tid == 0,
            )
        )
        snapshot.thread_pids = list(result.scalars().all())

        result = await self.db.execute(
            select(Post.pid, Post.tid, Post.quoted_pid).where(
                Post.type.in_(ACTIVE_TYPES),
                Post.uid == target_uid,
                Post.tid != 0,
            )
        )
        own_threads = set(snapshot.thread_pids)
        for row in result.all():
            if row.tid not in own_threads:
                snapshot.replies_elsewhere[row.tid] += 1
            snapshot.quoted_replies.append((row.pid, row.quoted_pid))
        return snapshot

    async def ban(self, moderator: Identity, target_uid: int) -> BanSnapshot:
        """
        Ban a user and take down everything they posted.

        The target's threads and replies are deleted, other users' replies
        inside those threads are flagged, and counters are reduced by what
        the target had live at the moment of the ban.
        """
        self._require_moderator(moderator)

        async with atomic(self.db):
            result = await self.db.execute(
                update(User)
                .where(User.uid == target_uid, User.grade < Grade.PRIVILEGED)
                .values(grade=Grade.BANNED)
                .returning(User.uid)
                .execution_options(synchronize_session=False)
            )
            if result.scalar_one_or_none() is None:
                raise Gone()

            # Taken before any post row changes; later steps only read the snapshot.
            snapshot = await self._snapshot(target_uid)

            if snapshot.thread_pids:
                await self.db.execute(
                    update(Post)
                    .where(
                        Post.type == PostType.LIVE,
                        Post.tid.in_(snapshot.thread_pids),
                        Post.uid != target_uid,
                    )
                    .values(type=PostType.FLAGGED)
                    .execution_options(synchronize_session=False)
                )
                await self.counters.adjust_many(
                    [CountKey.everything(), CountKey.author(target_uid)],
                    -len(snapshot.thread_pids),
                )

            for tid, replies in sorted(snapshot.replies_elsewhere.items()):
                await self.counters.adjust(CountKey.thread(tid), -replies)

            await self.db.execute(
                update(Post)
                .where(
                    Post.type.in_(ACTIVE_TYPES),
                    Post.uid == target_uid,
                )
                .values(type=PostType.DELETED)
                .execution_options(synchronize_session=False)
            )

            for tid in sorted(snapshot.replies_elsewhere):
                await self.db.execute(refresh_last_activity(tid))

        logger.info(
            "user %s banned by moderator %s: %d threads, %d replies removed",
            target_uid,
            moderator.uid,
            len(snapshot.thread_pids),
            len(snapshot.quoted_replies),
        )

        for pid, quoted_pid in snapshot.quoted_replies:
            await best_effort(self.db, self._retract, pid, quoted_pid, target_uid)
        return snapshot

    async def _retract(self, pid: int, quoted_pid: int, target_uid: int) -> None:
        result = await self.db.execute(select(Post.uid).where(Post.pid == quoted_pid))
        quote_uid = result.scalar_one_or_none()
        if quote_uid is not None and quote_uid != target_uid:
            await self.notifications.remove(quote_uid, pid, REPLY_STATES)
