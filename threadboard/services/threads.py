"""Read side of the board: thread index, thread pages and jump links."""

import math
from dataclasses import dataclass

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from threadboard.config import settings
from threadboard.errors import Gone
from threadboard.models.counter import Count, CountKey
from threadboard.models.post import ACTIVE_TYPES, VISIBLE_TYPES, Post
from threadboard.models.user import User
from threadboard.services.clock import epoch_now
from threadboard.services.config_store import ConfigStore
from threadboard.services.counters import CounterLedger


@dataclass
class ThreadPage:
    """One page of a thread: the root row, a slice of replies, and paging data."""

    root: object
    replies: list
    page: int
    page_size: int
    total: int
    locked: bool

    @property
    def pages(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))


class ThreadQueries:
    """Listing queries; everything here is read-only."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.config = ConfigStore(db)
        self.counters = CounterLedger(db)

    async def list_threads(self, page: int = 1) -> tuple[list, int, int]:
        """Visible thread roots by last activity. Returns (rows, page_size, total)."""
        page_size = await self.config.get_int("page_size_t", settings.page_size_t)
        page = max(page, 1)
        Replier = aliased(User, name="replier")
        result = await self.db.execute(
            select(
                Post.pid,
                Post.uid,
                Post.time,
                Post.content,
                Post.last_activity.label("last_activity"),
                Post.last_replier_uid.label("last_replier_uid"),
                User.name,
                Replier.name.label("last_replier_name"),
                func.coalesce(Count.quantity, 0).label("replies"),
            )
            .outerjoin(User, User.uid == Post.uid)
            .outerjoin(Replier, Replier.uid == Post.clue)
            .outerjoin(Count, Count.uid_tid == Post.pid)
            .where(Post.type.in_(VISIBLE_TYPES), Post.tid == 0)
            .order_by(Post.sort.desc(), Post.pid.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        total = await self.counters.get(CountKey.everything())
        return list(result.all()), page_size, total

    async def get_thread(self, tid: int, page: int = 1, *, now: int | None = None) -> ThreadPage:
        """A thread root with one page of its visible replies."""
        now = epoch_now() if now is None else now
        result = await self.db.execute(
            select(
                Post.pid,
                Post.uid,
                Post.type,
                Post.time,
                Post.content,
                Post.last_activity.label("last_activity"),
                Post.last_replier_uid.label("last_replier_uid"),
                User.name,
                User.credits,
            )
            .outerjoin(User, User.uid == Post.uid)
            .where(Post.pid == tid, Post.tid == 0, Post.type.in_(ACTIVE_TYPES))
        )
        root = result.one_or_none()
        if root is None:
            raise Gone()

        page_size = await self.config.get_int("page_size_p", settings.page_size_p)
        page = max(page, 1)
        Quote = aliased(Post, name="quote")
        QuoteUser = aliased(User, name="quote_user")
        result = await self.db.execute(
            select(
                Post.pid,
                Post.tid,
                Post.uid,
                Post.time,
                Post.content,
                Post.quoted_pid.label("quoted_pid"),
                User.name,
                User.credits,
                Quote.content.label("quote_content"),
                QuoteUser.name.label("quote_name"),
            )
            .outerjoin(User, User.uid == Post.uid)
            .outerjoin(
                Quote,
                and_(
                    Post.clue != Post.tid,
                    Quote.pid == Post.clue,
                    Quote.type.in_(ACTIVE_TYPES),
                ),
            )
            .outerjoin(QuoteUser, QuoteUser.uid == Quote.uid)
            .where(Post.type.in_(VISIBLE_TYPES), Post.tid == tid)
            .order_by(Post.sort.asc(), Post.pid.asc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        replies = list(result.all())
        total = await self.counters.get(CountKey.thread(tid))
        return ThreadPage(
            root=root,
            replies=replies,
            page=page,
            page_size=page_size,
            total=total,
            locked=now > root.last_activity + settings.reply_window_seconds,
        )

    async def jump(self, tid: int, time: int) -> int:
        """Page of a thread that holds the reply posted at ``time``."""
        page_size = await self.config.get_int("page_size_p", settings.page_size_p)
        result = await self.db.execute(
            select(func.count()).where(
                Post.type.in_(VISIBLE_TYPES),
                Post.tid == tid,
                Post.sort <= time,
            )
        )
        position = result.scalar_one() or 0
        return max(1, math.ceil(position / page_size))
