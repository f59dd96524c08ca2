"""AccountService tests."""

import pytest
from sqlalchemy import select

from threadboard.errors import Conflict
from threadboard.models.user import User
from threadboard.services.accounts import AccountService

NOW = 1_700_000_000


class TestRegister:
    """AccountService.register tests."""

    def test_placeholder_name_fits_name_column(self):
        """The temporary name never exceeds users.name, whatever the mail length."""
        limit = User.__table__.c.name.type.length
        names = {AccountService.placeholder_name() for _ in range(50)}
        assert len(names) == 50
        assert all(len(name) <= limit for name in names)
        assert all(not name[0].isalpha() for name in names)

    async def test_long_mail_gets_uid_name(self, db_session):
        mail = "a" * 60 + "@" + "b" * 60 + ".example.com"
        uid = await AccountService(db_session).register(mail, "secret123", now=NOW)

        result = await db_session.execute(select(User.name, User.mail).where(User.uid == uid))
        row = result.one()
        assert row.name == f"#{uid}"
        assert row.mail == mail

    async def test_duplicate_mail_conflicts(self, db_session):
        accounts = AccountService(db_session)
        await accounts.register("Same@Example.com", "secret123", now=NOW)
        with pytest.raises(Conflict):
            await accounts.register("same@example.com", "secret123", now=NOW)
