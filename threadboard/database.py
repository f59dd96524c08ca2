"""Database configuration, session management and the transactional boundary."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from threadboard.config import settings

engine = create_async_engine(
    settings.database_url,
    echo=False,
    pool_pre_ping=True,
)

AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

Base = declarative_base()


async def init_db() -> None:
    """Create any missing tables for the registered models."""
    from threadboard import models  # noqa: F401  # Ensure models are registered

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that provides a database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    All-or-nothing boundary around a compound mutation.

    Every statement issued inside the block is committed together, or the
    whole block is rolled back when any exception escapes it. Bulk updates
    bypass the identity map, so loaded objects are expired after commit.
    """
    try:
        yield db
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    db.expire_all()


def dialect_name(db: AsyncSession) -> str:
    """Name of the SQL dialect the session is bound to."""
    return db.bind.dialect.name
