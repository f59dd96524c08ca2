"""Moderation Pydantic schemas."""

from pydantic import BaseModel


class MuteResponse(BaseModel):
    """Grade of the target after a mute toggle."""

    uid: int
    grade: int


class BanResponse(BaseModel):
    """Summary of a ban cascade."""

    uid: int
    grade: int
    threads_removed: int
    replies_removed: int
