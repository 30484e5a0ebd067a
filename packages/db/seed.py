"""Demo data used for local development databases."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlmodel import select

from .models import CompanyTable, TicketTable, UserTable

logger = logging.getLogger(__name__)

DEMO_COMPANIES: tuple[str, ...] = (
    "ACME Corporation",
    "Tech Solutions Ltd",
    "Global Services Inc",
)

_OFFICERS: tuple[tuple[str, str], ...] = (
    ("Accountant", "accountant"),
    ("Secretary", "corporateSecretary"),
    ("Director", "director"),
)


async def seed_test_data(session_factory: async_sessionmaker[AsyncSession]) -> bool:
    """Insert demo companies, officers and open tickets.

    Returns ``False`` without touching anything when the database already holds
    at least one company.
    """

    async with session_factory() as session:
        async with session.begin():
            existing = await session.execute(select(func.count()).select_from(CompanyTable))
            if existing.scalar_one() > 0:
                logger.info("Skipping demo data, companies already present")
                return False

            now = datetime.now(timezone.utc)
            for company_name in DEMO_COMPANIES:
                company = CompanyTable(name=company_name, created_at=now, updated_at=now)
                session.add(company)
                await session.flush()

                officers: dict[str, UserTable] = {}
                for title, role in _OFFICERS:
                    user = UserTable(
                        name=f"{title} {company_name}",
                        role=role,
                        company_id=company.id,
                        created_at=now,
                        updated_at=now,
                    )
                    session.add(user)
                    officers[role] = user
                await session.flush()

                session.add(
                    TicketTable(
                        type="managementReport",
                        category="accounting",
                        status="open",
                        company_id=company.id,
                        assignee_id=officers["accountant"].id,
                        created_at=now,
                        updated_at=now,
                    )
                )
                session.add(
                    TicketTable(
                        type="registrationAddressChange",
                        category="corporate",
                        status="open",
                        company_id=company.id,
                        assignee_id=officers["corporateSecretary"].id,
                        created_at=now,
                        updated_at=now,
                    )
                )

    logger.info("Seeded demo data for %d companies", len(DEMO_COMPANIES))
    return True
