from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from packages.db.models import CompanyTable, TicketTable, UserTable

BASE_TIME = datetime(2024, 3, 25, 12, 0, tzinfo=timezone.utc)


class DatabaseSeeder:
    """Inserts rows directly, bypassing the services under test."""

    def __init__(self, session_factory: async_sessionmaker) -> None:
        self._session_factory = session_factory
        self._clock = BASE_TIME

    def _tick(self) -> datetime:
        self._clock += timedelta(seconds=1)
        return self._clock

    async def _insert(self, row):
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return row

    async def company(self, name: str = "ACME Corporation") -> CompanyTable:
        now = self._tick()
        return await self._insert(CompanyTable(name=name, created_at=now, updated_at=now))

    async def user(self, company_id: int, role: str, name: str | None = None) -> UserTable:
        now = self._tick()
        return await self._insert(
            UserTable(
                name=name or f"{role} {now.isoformat()}",
                role=role,
                company_id=company_id,
                created_at=now,
                updated_at=now,
            )
        )

    async def ticket(
        self,
        company_id: int,
        assignee_id: int,
        *,
        ticket_type: str = "managementReport",
        category: str = "accounting",
        status: str = "open",
    ) -> TicketTable:
        now = self._tick()
        return await self._insert(
            TicketTable(
                type=ticket_type,
                category=category,
                status=status,
                company_id=company_id,
                assignee_id=assignee_id,
                created_at=now,
                updated_at=now,
            )
        )


@pytest_asyncio.fixture
async def engine() -> AsyncEngine:
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(engine: AsyncEngine) -> async_sessionmaker:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def seeder(session_factory: async_sessionmaker) -> DatabaseSeeder:
    return DatabaseSeeder(session_factory)
