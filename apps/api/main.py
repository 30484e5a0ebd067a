import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy.exc import SQLAlchemyError

from apps.api.api.routes import metrics, ping, reports, tickets
from apps.api.core.config import get_settings
from apps.api.core.logging import configure_logging, init_tracer, shutdown_tracer
from apps.api.services.database import DatabaseHealthCheck, create_engine_and_sessions
from apps.api.services.reports import ReportService
from apps.api.services.tickets import TicketRepository, TicketService
from packages.db.seed import seed_test_data

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # pragma: no cover - executed by framework
    settings = get_settings()
    app.state.logger = configure_logging(settings)
    tracer_provider = init_tracer(settings)

    report_service = ReportService(
        input_dir=settings.reports_input_dir,
        output_dir=settings.reports_output_dir,
    )
    app.state.report_service = report_service

    db_engine, session_factory = create_engine_and_sessions(settings.postgres_dsn)
    app.state.db_health_check = DatabaseHealthCheck(session_factory)
    app.state.ticket_service = None
    try:
        ticket_repository = TicketRepository(session_factory, engine=db_engine)
        await ticket_repository.ensure_schema()
        if settings.seed_test_data:
            await seed_test_data(session_factory)
        app.state.ticket_service = TicketService(
            ticket_repository,
            default_page_size=settings.tickets_default_page_size,
        )
    except (SQLAlchemyError, OSError):
        logger.exception("Ticket service unavailable, database initialisation failed")
    try:
        yield
    finally:
        await report_service.drain()
        await db_engine.dispose()
        shutdown_tracer(tracer_provider)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.include_router(ping.router)
    app.include_router(metrics.router)
    app.include_router(tickets.router)
    app.include_router(reports.router)
    return app


app = create_app()
