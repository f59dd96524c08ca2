"""CounterLedger and CountKey tests."""

import pytest

from threadboard.database import atomic
from threadboard.models.counter import CountKey
from threadboard.services.counters import CounterLedger


class TestCountKey:
    """Natural key encoding."""

    def test_key_encoding(self):
        assert CountKey.thread(7).value == 7
        assert CountKey.author(7).value == -7
        assert CountKey.everything().value == 0

    def test_keys_compare_by_value(self):
        assert CountKey.thread(3) == CountKey(3)
        assert len({CountKey.author(5), CountKey(-5)}) == 1

    def test_invalid_ids_rejected(self):
        with pytest.raises(ValueError):
            CountKey.thread(0)
        with pytest.raises(ValueError):
            CountKey.author(-1)


class TestCounterLedger:
    """Server-side counter adjustments."""

    async def test_missing_counter_reads_zero(self, db_session):
        assert await CounterLedger(db_session).get(CountKey.thread(42)) == 0

    async def test_increment_creates_then_adds(self, db_session):
        ledger = CounterLedger(db_session)
        async with atomic(db_session):
            await ledger.adjust(CountKey.thread(42), 1)
        async with atomic(db_session):
            await ledger.adjust(CountKey.thread(42), 2)
        assert await ledger.get(CountKey.thread(42)) == 3

    async def test_decrement_never_creates(self, db_session):
        ledger = CounterLedger(db_session)
        async with atomic(db_session):
            await ledger.adjust(CountKey.author(9), -1)
        assert await ledger.get(CountKey.author(9)) == 0

    async def test_adjust_many_touches_each_key_once(self, db_session):
        ledger = CounterLedger(db_session)
        keys = [CountKey.author(1), CountKey.everything(), CountKey.everything()]
        async with atomic(db_session):
            await ledger.adjust_many(keys, 2)
        async with atomic(db_session):
            await ledger.adjust_many(keys, -1)
        assert await ledger.get(CountKey.author(1)) == 1
        assert await ledger.get(CountKey.everything()) == 1

    async def test_rollback_discards_adjustment(self, db_session):
        ledger = CounterLedger(db_session)
        with pytest.raises(RuntimeError):
            async with atomic(db_session):
                await ledger.adjust(CountKey.thread(5), 1)
                raise RuntimeError("abort")
        assert await ledger.get(CountKey.thread(5)) == 0
