from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping, Sequence

from opentelemetry import trace
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlmodel import SQLModel, select

from apps.api.metrics import MetricsRegistry, metrics_registry
from apps.api.metrics.definitions import TICKET_CONFLICTS, TICKETS_CREATED
from apps.api.services.assignment import (
    ASSIGNMENT_RULES,
    AssignmentRule,
    TicketCategory,
    TicketStatus,
    TicketType,
    UserRole,
    rule_for,
)
from packages.db.models import CompanyTable, TicketTable, UserTable

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class TicketServiceError(RuntimeError):
    """Base error for ticket workflow issues."""


class TicketValidationError(TicketServiceError):
    """Raised when the request is missing fields or carries invalid values."""


class CompanyNotFoundError(TicketServiceError):
    """Raised when a ticket targets a company that does not exist."""


class TicketConflictError(TicketServiceError):
    """Raised for duplicate tickets and ambiguous or missing assignees."""


@dataclass(slots=True)
class Company:
    id: int
    name: str


@dataclass(slots=True)
class User:
    id: int
    name: str
    role: UserRole
    company_id: int
    created_at: datetime


@dataclass(slots=True)
class Ticket:
    """Primary ticket record."""

    id: int
    type: TicketType
    category: TicketCategory
    status: TicketStatus
    company_id: int
    assignee_id: int
    created_at: datetime
    updated_at: datetime


@dataclass(slots=True)
class TicketListItem:
    """Ticket joined with its company and assignee for listings."""

    ticket: Ticket
    company: Company
    assignee: User


@dataclass(slots=True)
class TicketPage:
    items: Sequence[TicketListItem]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit)


class TicketRepository:
    """Persistence helper wrapping the `companies`, `users` and `tickets` tables."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        engine: AsyncEngine | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._engine: AsyncEngine | None = engine

    async def ensure_schema(self) -> None:
        if self._engine is None:
            raise RuntimeError("Session factory is not bound to an async engine")
        async with self._engine.begin() as connection:
            await connection.run_sync(SQLModel.metadata.create_all)

    async def get_company(self, company_id: int) -> Company | None:
        async with self._session_factory() as session:
            row = await session.get(CompanyTable, company_id)
            if row is None:
                return None
            return self._table_to_company(row)

    async def ticket_exists(self, *, company_id: int, ticket_type: TicketType) -> bool:
        async with self._session_factory() as session:
            result = await session.execute(
                select(TicketTable.id)
                .where(TicketTable.company_id == company_id, TicketTable.type == ticket_type.value)
                .limit(1)
            )
            return result.first() is not None

    async def list_users(self, *, company_id: int, role: UserRole) -> list[User]:
        """Users of a company holding ``role``, most recently created first."""

        async with self._session_factory() as session:
            result = await session.execute(
                select(UserTable)
                .where(UserTable.company_id == company_id, UserTable.role == role.value)
                .order_by(UserTable.created_at.desc(), UserTable.id.desc())
            )
            return [self._table_to_user(row) for row in result.scalars().all()]

    async def resolve_open_tickets(
        self, *, company_id: int, exclude_type: TicketType, updated_at: datetime
    ) -> int:
        async with self._session_factory() as session:
            async with session.begin():
                result = await session.execute(
                    update(TicketTable)
                    .where(
                        TicketTable.company_id == company_id,
                        TicketTable.status == TicketStatus.OPEN.value,
                        TicketTable.type != exclude_type.value,
                    )
                    .values(status=TicketStatus.RESOLVED.value, updated_at=updated_at)
                )
            return int(result.rowcount or 0)

    async def create_ticket(
        self,
        *,
        ticket_type: TicketType,
        category: TicketCategory,
        company_id: int,
        assignee_id: int,
        created_at: datetime,
    ) -> Ticket:
        async with self._session_factory() as session:
            row = TicketTable(
                type=ticket_type.value,
                category=category.value,
                status=TicketStatus.OPEN.value,
                company_id=company_id,
                assignee_id=assignee_id,
                created_at=created_at,
                updated_at=created_at,
            )
            session.add(row)
            await session.commit()
            await session.refresh(row)
            return self._table_to_ticket(row)

    async def list_tickets(
        self,
        *,
        offset: int,
        limit: int,
        status: TicketStatus | None = None,
        ticket_type: TicketType | None = None,
        company_id: int | None = None,
    ) -> tuple[int, list[TicketListItem]]:
        conditions = []
        if status is not None:
            conditions.append(TicketTable.status == status.value)
        if ticket_type is not None:
            conditions.append(TicketTable.type == ticket_type.value)
        if company_id is not None:
            conditions.append(TicketTable.company_id == company_id)

        count_stmt = select(func.count()).select_from(TicketTable)
        rows_stmt = (
            select(TicketTable, CompanyTable, UserTable)
            .join(CompanyTable, CompanyTable.id == TicketTable.company_id)
            .join(UserTable, UserTable.id == TicketTable.assignee_id)
        )
        for condition in conditions:
            count_stmt = count_stmt.where(condition)
            rows_stmt = rows_stmt.where(condition)
        rows_stmt = (
            rows_stmt.order_by(TicketTable.created_at.desc(), TicketTable.id.desc()).offset(offset).limit(limit)
        )

        async with self._session_factory() as session:
            total = (await session.execute(count_stmt)).scalar_one()
            result = await session.execute(rows_stmt)
            items = [
                TicketListItem(
                    ticket=self._table_to_ticket(ticket_row),
                    company=self._table_to_company(company_row),
                    assignee=self._table_to_user(user_row),
                )
                for ticket_row, company_row, user_row in result.all()
            ]
        return int(total), items

    @staticmethod
    def _table_to_company(row: CompanyTable) -> Company:
        return Company(id=int(row.id), name=row.name)

    @staticmethod
    def _table_to_user(row: UserTable) -> User:
        return User(
            id=int(row.id),
            name=row.name,
            role=UserRole(row.role),
            company_id=row.company_id,
            created_at=_ensure_datetime(row.created_at),
        )

    @staticmethod
    def _table_to_ticket(row: TicketTable) -> Ticket:
        return Ticket(
            id=int(row.id),
            type=TicketType(row.type),
            category=TicketCategory(row.category),
            status=TicketStatus(row.status),
            company_id=row.company_id,
            assignee_id=row.assignee_id,
            created_at=_ensure_datetime(row.created_at),
            updated_at=_ensure_datetime(row.updated_at),
        )


def _ensure_datetime(value: datetime | None) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value
    raise TypeError("Expected datetime value from database")


class TicketService:
    """Ticket creation with rule-based assignment, and paginated listing."""

    def __init__(
        self,
        repository: TicketRepository,
        *,
        rules: Mapping[TicketType, AssignmentRule] = ASSIGNMENT_RULES,
        default_page_size: int = 10,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._repository = repository
        self._rules = rules
        self._default_page_size = default_page_size
        registry = metrics or metrics_registry
        self._created = registry.counter(TICKETS_CREATED, label_names=("type",))
        self._conflicts = registry.counter(TICKET_CONFLICTS, label_names=("type",))

    async def create_ticket(self, *, ticket_type: str | TicketType | None, company_id: int | None) -> Ticket:
        resolved_type, company_id = self._validate(ticket_type, company_id)
        rule = rule_for(resolved_type, self._rules)

        with tracer.start_as_current_span("tickets.create") as span:
            span.set_attribute("ticket.type", resolved_type.value)
            span.set_attribute("ticket.company_id", company_id)
            try:
                ticket = await self._create(resolved_type, rule, company_id)
            except TicketConflictError as exc:
                self._conflicts.inc(labels={"type": resolved_type.value})
                logger.info("Rejected %s ticket for company %s: %s", resolved_type.value, company_id, exc)
                raise

        self._created.inc(labels={"type": ticket.type.value})
        logger.info(
            "Created %s ticket %s for company %s assigned to user %s",
            ticket.type.value,
            ticket.id,
            ticket.company_id,
            ticket.assignee_id,
        )
        return ticket

    async def list_tickets(
        self,
        *,
        page: int = 1,
        limit: int | None = None,
        status: TicketStatus | None = None,
        ticket_type: TicketType | None = None,
        company_id: int | None = None,
    ) -> TicketPage:
        limit = self._default_page_size if limit is None else limit
        if page < 1 or limit < 1:
            raise TicketValidationError("Page and limit must be positive numbers")

        total, items = await self._repository.list_tickets(
            offset=(page - 1) * limit,
            limit=limit,
            status=status,
            ticket_type=ticket_type,
            company_id=company_id,
        )
        return TicketPage(items=items, total=total, page=page, limit=limit)

    @staticmethod
    def _validate(ticket_type: str | TicketType | None, company_id: int | None) -> tuple[TicketType, int]:
        if not ticket_type or not company_id:
            raise TicketValidationError("Type and companyId are required")
        try:
            return TicketType(ticket_type), company_id
        except ValueError:
            raise TicketValidationError("Invalid ticket type") from None

    async def _create(self, ticket_type: TicketType, rule: AssignmentRule, company_id: int) -> Ticket:
        company = await self._repository.get_company(company_id)
        if company is None:
            raise CompanyNotFoundError("Company not found")

        if rule.one_per_company and await self._repository.ticket_exists(
            company_id=company_id, ticket_type=ticket_type
        ):
            raise TicketConflictError(f"A {ticket_type.value} ticket already exists for this company")

        assignee = await self._resolve_assignee(ticket_type, rule, company_id)
        now = datetime.now(timezone.utc)

        if rule.resolves_open_tickets:
            resolved = await self._repository.resolve_open_tickets(
                company_id=company_id, exclude_type=ticket_type, updated_at=now
            )
            logger.info("Resolved %d open tickets of company %s ahead of %s", resolved, company_id, ticket_type.value)

        return await self._repository.create_ticket(
            ticket_type=ticket_type,
            category=rule.category,
            company_id=company_id,
            assignee_id=assignee.id,
            created_at=now,
        )

    async def _resolve_assignee(self, ticket_type: TicketType, rule: AssignmentRule, company_id: int) -> User:
        for role in rule.roles:
            candidates = await self._repository.list_users(company_id=company_id, role=role)
            if not candidates:
                continue
            if rule.unique and len(candidates) > 1:
                raise TicketConflictError(
                    f"Multiple users with role {role.value} found. Cannot create a {ticket_type.value} ticket"
                )
            return candidates[0]
        raise TicketConflictError(rule.missing_assignee_message)
