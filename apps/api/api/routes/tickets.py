from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from apps.api.dependencies.services import TicketServiceDep
from apps.api.services.assignment import TicketCategory, TicketStatus, TicketType, UserRole
from apps.api.services.tickets import (
    CompanyNotFoundError,
    Ticket,
    TicketConflictError,
    TicketListItem,
    TicketPage,
    TicketValidationError,
)

router = APIRouter(prefix="/api/v1/tickets", tags=["tickets"])


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketCreateRequest(CamelModel):
    type: str | None = Field(default=None)
    company_id: int | None = Field(default=None)


class TicketResponse(CamelModel):
    id: int
    type: TicketType
    company_id: int
    assignee_id: int
    status: TicketStatus
    category: TicketCategory


class CompanyModel(CamelModel):
    id: int
    name: str


class AssigneeModel(CamelModel):
    id: int
    name: str
    role: UserRole


class TicketListEntry(TicketResponse):
    created_at: datetime
    updated_at: datetime
    company: CompanyModel
    assignee: AssigneeModel


class PaginationModel(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class TicketListResponse(CamelModel):
    data: list[TicketListEntry]
    pagination: PaginationModel


def _to_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        type=ticket.type,
        company_id=ticket.company_id,
        assignee_id=ticket.assignee_id,
        status=ticket.status,
        category=ticket.category,
    )


def _to_list_entry(item: TicketListItem) -> TicketListEntry:
    ticket = item.ticket
    return TicketListEntry(
        id=ticket.id,
        type=ticket.type,
        company_id=ticket.company_id,
        assignee_id=ticket.assignee_id,
        status=ticket.status,
        category=ticket.category,
        created_at=ticket.created_at,
        updated_at=ticket.updated_at,
        company=CompanyModel(id=item.company.id, name=item.company.name),
        assignee=AssigneeModel(id=item.assignee.id, name=item.assignee.name, role=item.assignee.role),
    )


def _to_list_response(page: TicketPage) -> TicketListResponse:
    return TicketListResponse(
        data=[_to_list_entry(item) for item in page.items],
        pagination=PaginationModel(
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        ),
    )


@router.get("", response_model=TicketListResponse, summary="List tickets, newest first")
async def list_tickets(
    service: TicketServiceDep,
    page: int = Query(default=1),
    limit: int | None = Query(default=None),
    status_filter: TicketStatus | None = Query(default=None, alias="status"),
    type_filter: TicketType | None = Query(default=None, alias="type"),
    company_id: int | None = Query(default=None, alias="companyId"),
) -> TicketListResponse:
    try:
        result = await service.list_tickets(
            page=page,
            limit=limit,
            status=status_filter,
            ticket_type=type_filter,
            company_id=company_id,
        )
    except TicketValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _to_list_response(result)


@router.post("", response_model=TicketResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreateRequest, service: TicketServiceDep) -> TicketResponse:
    try:
        ticket = await service.create_ticket(ticket_type=payload.type, company_id=payload.company_id)
    except TicketValidationError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except CompanyNotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except TicketConflictError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    return _to_response(ticket)
