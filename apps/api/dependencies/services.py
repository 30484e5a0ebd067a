from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request

from apps.api.services.database import DatabaseHealthCheck
from apps.api.services.reports import ReportService
from apps.api.services.tickets import TicketService


async def get_ticket_service(request: Request) -> TicketService:
    service = getattr(request.app.state, "ticket_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Ticket service is not configured")
    return service


async def get_report_service(request: Request) -> ReportService:
    service = getattr(request.app.state, "report_service", None)
    if service is None:
        raise HTTPException(status_code=503, detail="Report service is not configured")
    return service


async def get_health_check(request: Request) -> DatabaseHealthCheck:
    health_check = getattr(request.app.state, "db_health_check", None)
    if health_check is None:
        raise HTTPException(status_code=503, detail="Database is not configured")
    return health_check


TicketServiceDep = Annotated[TicketService, Depends(get_ticket_service)]
ReportServiceDep = Annotated[ReportService, Depends(get_report_service)]
HealthCheckDep = Annotated[DatabaseHealthCheck, Depends(get_health_check)]
