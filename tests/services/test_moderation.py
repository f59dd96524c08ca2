"""
Moderation service tests:
- mute toggle
- ban cascade over threads, replies, counters and notifications
"""

import pytest
from sqlalchemy import select

from threadboard.errors import Forbidden, Gone
from threadboard.models.counter import CountKey
from threadboard.models.message import Message
from threadboard.models.post import Post, PostType
from threadboard.models.user import Grade, User
from threadboard.services.counters import CounterLedger
from threadboard.services.moderation import ModerationService
from threadboard.services.posts import PostService

NOW = 1_700_000_000
MINUTE = 60


async def _grade(db, uid):
    result = await db.execute(select(User.grade).where(User.uid == uid))
    return result.scalar_one()


async def _types(db, uid):
    result = await db.execute(select(Post.pid, Post.type).where(Post.uid == uid))
    return dict(result.all())


class TestToggleMute:
    """ModerationService.toggle_mute tests."""

    async def test_mute_then_unmute(self, db_session, test_user, test_moderator, identity_of):
        """Toggling twice restores a normal user."""
        moderation = ModerationService(db_session)
        moderator = await identity_of(test_moderator)

        assert await moderation.toggle_mute(moderator, test_user["uid"]) == Grade.MUTED
        assert await _grade(db_session, test_user["uid"]) == Grade.MUTED

        assert await moderation.toggle_mute(moderator, test_user["uid"]) == Grade.NORMAL
        assert await _grade(db_session, test_user["uid"]) == Grade.NORMAL

    async def test_privileged_target_is_gone(
        self, db_session, privileged_user, test_moderator, identity_of
    ):
        moderation = ModerationService(db_session)
        with pytest.raises(Gone):
            await moderation.toggle_mute(await identity_of(test_moderator), privileged_user["uid"])
        assert await _grade(db_session, privileged_user["uid"]) == Grade.PRIVILEGED

    async def test_unknown_target_is_gone(self, db_session, test_moderator, identity_of):
        moderation = ModerationService(db_session)
        with pytest.raises(Gone):
            await moderation.toggle_mute(await identity_of(test_moderator), 9999)

    async def test_requires_moderator(self, db_session, test_user, second_user, identity_of):
        moderation = ModerationService(db_session)
        with pytest.raises(Forbidden):
            await moderation.toggle_mute(await identity_of(test_user), second_user["uid"])
        assert await _grade(db_session, second_user["uid"]) == Grade.NORMAL


class TestBan:
    """ModerationService.ban tests."""

    async def _board(self, db, target, other, third, identity_of):
        """
        Target opens a thread that others reply to, and replies in a thread
        owned by ``other``.
        """
        posts = PostService(db)
        own = await posts.create_thread(await identity_of(target), "Target topic", now=NOW)
        theirs = await posts.create_thread(await identity_of(other), "Other topic", now=NOW)

        other_in_own = await posts.create_reply(
            await identity_of(other), own.pid, "Other answers", now=NOW + MINUTE
        )
        third_in_own = await posts.create_reply(
            await identity_of(third), own.pid, "Third answers", now=NOW + MINUTE
        )
        target_in_theirs = await posts.create_reply(
            await identity_of(target), theirs.pid, "Target answers", now=NOW + MINUTE
        )
        return {
            "own": own.pid,
            "theirs": theirs.pid,
            "other_in_own": other_in_own.pid,
            "third_in_own": third_in_own.pid,
            "target_in_theirs": target_in_theirs.pid,
        }

    async def test_ban_cascade(
        self, db_session, test_user, second_user, third_user, test_moderator, identity_of
    ):
        """Grade, post states, counters and last activity after a ban."""
        board = await self._board(db_session, test_user, second_user, third_user, identity_of)
        ledger = CounterLedger(db_session)
        assert await ledger.get(CountKey.everything()) == 2
        assert await ledger.get(CountKey.thread(board["theirs"])) == 1

        snapshot = await ModerationService(db_session).ban(
            await identity_of(test_moderator), test_user["uid"]
        )

        assert snapshot.thread_pids == [board["own"]]
        assert snapshot.replies_elsewhere == {board["theirs"]: 1}

        assert await _grade(db_session, test_user["uid"]) == Grade.BANNED
        assert set((await _types(db_session, test_user["uid"])).values()) == {PostType.DELETED}

        # Other users' replies inside the target's thread are flagged, not deleted.
        assert (await _types(db_session, second_user["uid"]))[board["other_in_own"]] == PostType.FLAGGED
        assert (await _types(db_session, third_user["uid"]))[board["third_in_own"]] == PostType.FLAGGED
        # Their own thread is untouched.
        assert (await _types(db_session, second_user["uid"]))[board["theirs"]] == PostType.LIVE

        assert await ledger.get(CountKey.everything()) == 1
        assert await ledger.get(CountKey.author(test_user["uid"])) == 0
        assert await ledger.get(CountKey.author(second_user["uid"])) == 1
        assert await ledger.get(CountKey.thread(board["theirs"])) == 0
        # Flagged replies still count as live for their thread.
        assert await ledger.get(CountKey.thread(board["own"])) == 2

        result = await db_session.execute(
            select(Post.sort, Post.clue, Post.time).where(Post.pid == board["theirs"])
        )
        root = result.one()
        assert (root.sort, root.clue) == (root.time, 0)

    async def test_ban_retracts_notifications(
        self, db_session, test_user, second_user, third_user, test_moderator, identity_of
    ):
        """Notifications raised by the target's replies disappear."""
        board = await self._board(db_session, test_user, second_user, third_user, identity_of)
        result = await db_session.execute(
            select(Message.uid).where(Message.pid == board["target_in_theirs"])
        )
        assert result.scalars().all() == [second_user["uid"]]

        await ModerationService(db_session).ban(
            await identity_of(test_moderator), test_user["uid"]
        )

        result = await db_session.execute(
            select(Message.uid).where(Message.pid == board["target_in_theirs"])
        )
        assert result.scalars().all() == []

    async def test_banned_user_has_no_identity(
        self, db_session, test_user, test_moderator, identity_of
    ):
        await ModerationService(db_session).ban(await identity_of(test_moderator), test_user["uid"])
        assert await identity_of(test_user) is None

    async def test_ban_privileged_target_is_gone(
        self, db_session, privileged_user, test_moderator, identity_of
    ):
        """Privileged users cannot be banned."""
        moderation = ModerationService(db_session)
        moderator = await identity_of(test_moderator)
        with pytest.raises(Gone):
            await moderation.ban(moderator, privileged_user["uid"])
        assert await _grade(db_session, privileged_user["uid"]) == Grade.PRIVILEGED

    async def test_ban_requires_moderator(self, db_session, test_user, second_user, identity_of):
        with pytest.raises(Forbidden):
            await ModerationService(db_session).ban(
                await identity_of(second_user), test_user["uid"]
            )
        assert await _grade(db_session, test_user["uid"]) == Grade.NORMAL
