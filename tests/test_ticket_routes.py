from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from apps.api.dependencies import services as service_deps
from apps.api.main import create_app
from apps.api.services.assignment import TicketCategory, TicketStatus, TicketType, UserRole
from apps.api.services.tickets import (
    Company,
    CompanyNotFoundError,
    Ticket,
    TicketConflictError,
    TicketListItem,
    TicketPage,
    TicketValidationError,
    User,
)


def _make_ticket(*, ticket_id: int = 1, ticket_type: TicketType = TicketType.MANAGEMENT_REPORT) -> Ticket:
    now = datetime(2024, 3, 25, 12, 0, tzinfo=timezone.utc)
    return Ticket(
        id=ticket_id,
        type=ticket_type,
        category=TicketCategory.ACCOUNTING,
        status=TicketStatus.OPEN,
        company_id=1,
        assignee_id=7,
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def ticket_client():
    app = create_app()
    service = AsyncMock()

    async def override_service():
        return service

    app.dependency_overrides[service_deps.get_ticket_service] = override_service

    client = TestClient(app)
    try:
        yield client, service
    finally:
        app.dependency_overrides.clear()


def test_create_ticket_returns_created(ticket_client):
    client, service = ticket_client
    service.create_ticket = AsyncMock(return_value=_make_ticket())

    response = client.post("/api/v1/tickets", json={"type": "managementReport", "companyId": 1})

    assert response.status_code == 201
    assert response.json() == {
        "id": 1,
        "type": "managementReport",
        "companyId": 1,
        "assigneeId": 7,
        "status": "open",
        "category": "accounting",
    }
    service.create_ticket.assert_awaited_once_with(ticket_type="managementReport", company_id=1)


def test_create_ticket_passes_missing_fields_to_service(ticket_client):
    client, service = ticket_client
    service.create_ticket = AsyncMock(side_effect=TicketValidationError("Type and companyId are required"))

    response = client.post("/api/v1/tickets", json={})

    assert response.status_code == 400
    assert response.json()["detail"] == "Type and companyId are required"
    service.create_ticket.assert_awaited_once_with(ticket_type=None, company_id=None)


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (CompanyNotFoundError("Company not found"), 404),
        (TicketConflictError("A registrationAddressChange ticket already exists for this company"), 409),
        (TicketValidationError("Invalid ticket type"), 400),
    ],
)
def test_create_ticket_maps_service_errors(ticket_client, error, status_code):
    client, service = ticket_client
    service.create_ticket = AsyncMock(side_effect=error)

    response = client.post("/api/v1/tickets", json={"type": "registrationAddressChange", "companyId": 1})

    assert response.status_code == status_code
    assert response.json()["detail"] == str(error)


def test_list_tickets_returns_data_and_pagination(ticket_client):
    client, service = ticket_client
    item = TicketListItem(
        ticket=_make_ticket(),
        company=Company(id=1, name="ACME Corporation"),
        assignee=User(
            id=7,
            name="Jane Accountant",
            role=UserRole.ACCOUNTANT,
            company_id=1,
            created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ),
    )
    service.list_tickets = AsyncMock(return_value=TicketPage(items=[item], total=11, page=2, limit=5))

    response = client.get(
        "/api/v1/tickets",
        params={"page": 2, "limit": 5, "status": "open", "type": "managementReport", "companyId": 1},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["pagination"] == {"total": 11, "page": 2, "limit": 5, "totalPages": 3}
    entry = body["data"][0]
    assert entry["assigneeId"] == 7
    assert entry["company"] == {"id": 1, "name": "ACME Corporation"}
    assert entry["assignee"] == {"id": 7, "name": "Jane Accountant", "role": "accountant"}
    assert "createdAt" in entry and "updatedAt" in entry
    service.list_tickets.assert_awaited_once_with(
        page=2,
        limit=5,
        status=TicketStatus.OPEN,
        ticket_type=TicketType.MANAGEMENT_REPORT,
        company_id=1,
    )


def test_list_tickets_uses_service_defaults(ticket_client):
    client, service = ticket_client
    service.list_tickets = AsyncMock(return_value=TicketPage(items=[], total=0, page=1, limit=10))

    response = client.get("/api/v1/tickets")

    assert response.status_code == 200
    assert response.json() == {"data": [], "pagination": {"total": 0, "page": 1, "limit": 10, "totalPages": 0}}
    service.list_tickets.assert_awaited_once_with(
        page=1, limit=None, status=None, ticket_type=None, company_id=None
    )


def test_list_tickets_rejects_non_positive_paging(ticket_client):
    client, service = ticket_client
    service.list_tickets = AsyncMock(side_effect=TicketValidationError("Page and limit must be positive numbers"))

    response = client.get("/api/v1/tickets", params={"page": 0})

    assert response.status_code == 400


def test_ticket_routes_unavailable_without_service():
    client = TestClient(create_app())

    response = client.get("/api/v1/tickets")

    assert response.status_code == 503
