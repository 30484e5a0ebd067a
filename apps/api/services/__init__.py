"""Service layer exports."""

from .database import DatabaseHealthCheck, create_engine_and_sessions, to_asyncpg_dsn
from .reports import ReportRun, ReportScope, ReportService, ReportStatus, UnknownReportScopeError
from .tickets import (
    CompanyNotFoundError,
    TicketConflictError,
    TicketRepository,
    TicketService,
    TicketValidationError,
)

__all__ = [
    "CompanyNotFoundError",
    "DatabaseHealthCheck",
    "ReportRun",
    "ReportScope",
    "ReportService",
    "ReportStatus",
    "TicketConflictError",
    "TicketRepository",
    "TicketService",
    "TicketValidationError",
    "UnknownReportScopeError",
    "create_engine_and_sessions",
    "to_asyncpg_dsn",
]
