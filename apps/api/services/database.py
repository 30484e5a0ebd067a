from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine


def to_asyncpg_dsn(dsn: str) -> str:
    """Ensure the SQLAlchemy DSN uses the asyncpg driver."""

    if dsn.startswith("postgresql+asyncpg://"):
        return dsn
    if dsn.startswith("postgresql://"):
        return "postgresql+asyncpg://" + dsn[len("postgresql://") :]
    if dsn.startswith("postgres://"):
        return "postgresql+asyncpg://" + dsn[len("postgres://") :]
    return dsn


def create_engine_and_sessions(dsn: str) -> tuple[AsyncEngine, async_sessionmaker[AsyncSession]]:
    engine = create_async_engine(to_asyncpg_dsn(dsn), future=True)
    return engine, async_sessionmaker(engine, expire_on_commit=False)


@dataclass(slots=True)
class DatabaseHealthCheck:
    """Explicit connectivity probe against the configured database."""

    session_factory: async_sessionmaker[AsyncSession]

    async def test_connection(self) -> bool:
        async with self.session_factory() as session:
            await session.execute(text("SELECT 1"))
        return True
