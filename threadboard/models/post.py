"""Unified thread/reply post model."""

from dataclasses import dataclass

from sqlalchemy import Column, Index, Integer, Text, text
from sqlalchemy.orm import synonym

from threadboard.database import Base


class PostType:
    """Post lifecycle states."""

    LIVE = 0
    FLAGGED = 1
    RESERVED = 2  # never assigned
    DELETED = 3


# Edit/reply eligibility and counting include flagged posts; listings do not.
ACTIVE_TYPES = (PostType.LIVE, PostType.FLAGGED)
VISIBLE_TYPES = (PostType.LIVE,)


@dataclass(frozen=True)
class ThreadView:
    """Root-facing projection of the stored sort/clue pair."""

    pid: int
    last_activity: int
    last_replier_uid: int


@dataclass(frozen=True)
class ReplyView:
    """Reply-facing projection of the stored sort/clue pair."""

    pid: int
    tid: int
    post_time: int
    quoted_pid: int


class Post(Base):
    """
    A thread root (``tid == 0``) or a reply (``tid`` is the root's pid).

    The ``sort`` and ``clue`` columns are shared storage. Read them through
    the synonyms, never directly:

    - roots: ``last_activity`` / ``last_replier_uid``
    - replies: ``post_time`` / ``quoted_pid``
    """

    __tablename__ = "posts"

    pid = Column(Integer, primary_key=True, autoincrement=True)
    tid = Column(Integer, nullable=False, server_default=text("0"))
    uid = Column(Integer, nullable=False, server_default=text("0"))
    type = Column(Integer, nullable=False, server_default=text("0"))
    sort = Column(Integer, nullable=False, server_default=text("0"))
    clue = Column(Integer, nullable=False, server_default=text("0"))
    time = Column(Integer, nullable=False, server_default=text("0"))
    content = Column(Text, nullable=False, server_default=text("''"))

    last_activity = synonym("sort")
    last_replier_uid = synonym("clue")
    post_time = synonym("sort")
    quoted_pid = synonym("clue")

    __table_args__ = (
        Index("idx_posts_type_tid_sort", type, tid, sort),
        Index("idx_posts_type_uid_tid_sort", type, uid, tid, sort),
        {"sqlite_autoincrement": True},
    )
