"""Account registration, login and profile updates."""

import logging
import secrets

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.auth.password import hash_password, verify_password
from threadboard.database import atomic
from threadboard.errors import Conflict, Unauthenticated
from threadboard.models.user import Grade, User
from threadboard.services.clock import epoch_now

logger = logging.getLogger(__name__)


class AccountService:
    """User account lifecycle outside of posting."""

    def __init__(self, db: AsyncSession):
        self.db = db

    @staticmethod
    def placeholder_name() -> str:
        """
        Unique name held only until the uid is known.

        Starts with "~", which user-chosen names cannot, and fits users.name.
        """
        return f"~{secrets.token_hex(16)}"

    async def register(self, mail: str, password: str, *, now: int | None = None) -> int:
        """Create an account and return its uid. Duplicate mail raises Conflict."""
        now = epoch_now() if now is None else now
        mail = mail.lower()

        existing = await self.db.execute(select(User.uid).where(User.mail == mail))
        if existing.scalar_one_or_none() is not None:
            raise Conflict()

        user = User(
            mail=mail,
            name=self.placeholder_name(),
            hash=hash_password(password),
            time=now,
        )
        try:
            async with atomic(self.db):
                self.db.add(user)
                await self.db.flush()
                uid = user.uid
                user.name = f"#{uid}"
                await self.db.flush()
        except IntegrityError:
            raise Conflict()

        logger.info("user %s registered", uid)
        return uid

    async def authenticate(self, acct: str, password: str) -> int:
        """Resolve mail-or-name plus password to a uid."""
        result = await self.db.execute(
            select(User.uid, User.hash).where(
                or_(User.mail == acct.lower(), User.name == acct),
                User.grade > Grade.BANNED,
            )
        )
        row = result.first()
        if row is None or not verify_password(password, row.hash):
            raise Unauthenticated("invalid_credentials", "Invalid account or password")
        return row.uid

    async def profile(self, uid: int):
        result = await self.db.execute(
            select(
                User.uid,
                User.mail,
                User.name,
                User.grade,
                User.credits,
                User.golds,
                User.time,
                User.last_time,
                User.last_read,
            ).where(User.uid == uid)
        )
        return result.one()

    async def save_profile(
        self,
        uid: int,
        mail: str,
        name: str,
        password_confirm: str,
        new_password: str | None = None,
    ) -> None:
        """Update mail, name and optionally the password after re-checking the current one."""
        result = await self.db.execute(select(User.hash).where(User.uid == uid))
        stored = result.scalar_one_or_none()
        if stored is None or not verify_password(password_confirm, stored):
            raise Unauthenticated("pass_confirm", "Current password does not match")

        values = {"mail": mail.lower(), "name": name}
        if new_password:
            values["hash"] = hash_password(new_password)

        try:
            async with atomic(self.db):
                await self.db.execute(
                    update(User)
                    .where(User.uid == uid)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )
        except IntegrityError:
            raise Conflict()
