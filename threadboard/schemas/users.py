"""User-related Pydantic schemas."""

import re

from pydantic import BaseModel, field_validator

from threadboard.schemas.auth import check_password

MAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class UserMeResponse(BaseModel):
    """Response for GET /users/me endpoint."""

    uid: int
    mail: str
    name: str
    grade: int
    credits: int
    golds: int
    time: int
    last_time: int
    last_read: int


class UpdateProfileRequest(BaseModel):
    """
    Request to update the caller's profile.

    Field rules are checked in the router so each failure maps to its own
    short code (``mail_illegal``, ``name_too_long``, ...).
    """

    mail: str = ""
    name: str = ""
    password: str | None = None
    password_confirm: str = ""

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str | None) -> str | None:
        """A new password follows the registration rules; empty means unchanged."""
        return check_password(v) if v else v


def mail_problem(mail: str) -> str | None:
    """Short code describing why ``mail`` is unacceptable, or None."""
    if not mail:
        return "mail_empty"
    if len(mail) > 320:
        return "mail_too_long"
    if not MAIL_PATTERN.match(mail):
        return "mail_illegal"
    return None


def name_problem(name: str) -> str | None:
    """Short code describing why ``name`` is unacceptable, or None."""
    if not name:
        return "name_empty"
    if len(name) > 20:
        return "name_too_long"
    if not name[0].isalpha() or not all(ch.isalnum() or ch in "_-" for ch in name[1:]):
        return "name_illegal"
    return None
