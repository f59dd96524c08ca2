"""Counter ledger: relative adjustments of the denormalized counts."""

from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from threadboard.database import dialect_name
from threadboard.models.counter import Count, CountKey

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


class CounterLedger:
    """
    Applies deltas to counter rows inside the caller's transaction.

    Every change is expressed as ``quantity = quantity + delta`` on the
    server; counts are never read into Python and written back.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def adjust(self, key: CountKey, delta: int) -> None:
        """Add ``delta`` to the counter at ``key``, creating it on first increment."""
        await self.adjust_many([key], delta)

    async def adjust_many(self, keys: Iterable[CountKey], delta: int) -> None:
        """Add the same ``delta`` to several counters."""
        values = sorted({key.value for key in keys})
        if not values or delta == 0:
            return

        if delta < 0:
            # Rows exist from their first increment; decrements never create one.
            await self.db.execute(
                update(Count)
                .where(Count.uid_tid.in_(values))
                .values(quantity=Count.quantity + delta)
                .execution_options(synchronize_session=False)
            )
            return

        insert = _UPSERT_DIALECTS[dialect_name(self.db)]
        stmt = insert(Count).values([{"uid_tid": value, "quantity": delta} for value in values])
        stmt = stmt.on_conflict_do_update(
            index_elements=[Count.uid_tid],
            set_={"quantity": Count.quantity + delta},
        )
        await self.db.execute(stmt)

    async def get(self, key: CountKey) -> int:
        """Current quantity at ``key`` (0 when the row does not exist yet)."""
        result = await self.db.execute(
            select(Count.quantity).where(Count.uid_tid == key.value)
        )
        return result.scalar_one_or_none() or 0
