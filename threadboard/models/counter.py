"""Denormalized counters keyed by a natural key."""

from dataclasses import dataclass

from sqlalchemy import Column, Integer, text

from threadboard.database import Base


@dataclass(frozen=True)
class CountKey:
    """
    Natural key of a counter row.

    Positive values are thread pids (live replies of that thread), negative
    values are negated user ids (live threads of that user), and zero is the
    global live-thread count.
    """

    value: int

    @classmethod
    def thread(cls, tid: int) -> "CountKey":
        if tid <= 0:
            raise ValueError("thread counter requires a positive pid")
        return cls(tid)

    @classmethod
    def author(cls, uid: int) -> "CountKey":
        if uid <= 0:
            raise ValueError("author counter requires a positive uid")
        return cls(-uid)

    @classmethod
    def everything(cls) -> "CountKey":
        return cls(0)


class Count(Base):
    """Counter row; no surrogate id, never deleted."""

    __tablename__ = "counts"

    uid_tid = Column(Integer, primary_key=True, autoincrement=False)
    quantity = Column(Integer, nullable=False, server_default=text("0"))
