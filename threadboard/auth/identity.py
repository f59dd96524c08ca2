"""Caller identity and the privilege predicate."""

from dataclasses import dataclass

from sqlalchemy import ColumnElement, false, or_, true

from threadboard.models.user import Grade


@dataclass(frozen=True)
class Identity:
    """Snapshot of the authenticated caller taken at the start of a request."""

    uid: int
    grade: int
    last_time: int

    @property
    def elevated(self) -> bool:
        return self.grade >= Grade.MODERATOR

    @property
    def muted(self) -> bool:
        return self.grade == Grade.MUTED


def is_admin(
    identity: Identity,
    elevated: ColumnElement[bool] | None = None,
    owner: ColumnElement[bool] | None = None,
) -> ColumnElement[bool]:
    """
    SQL predicate that holds when the caller is elevated or ``owner`` holds.

    ``elevated`` defaults to the caller's moderator status rendered as a
    constant, so the result can be combined with other row filters inside a
    single WHERE clause.

    Usage:
        update(Post).where(
            Post.pid == pid,
            is_admin(caller, owner=Post.uid == caller.uid),
        )
    """
    if elevated is None:
        elevated = true() if identity.elevated else false()
    if owner is None:
        return elevated
    return or_(elevated, owner)
