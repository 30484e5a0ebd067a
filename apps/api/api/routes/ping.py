import logging

from fastapi import APIRouter, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from apps.api.dependencies.services import HealthCheckDep

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Public health probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/db", summary="Database connectivity probe")
async def ping_database(health_check: HealthCheckDep) -> dict[str, str]:
    try:
        await health_check.test_connection()
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database health check failed: %s", exc)
        raise HTTPException(status_code=503, detail="Database is unreachable") from exc
    return {"status": "ok", "database": "ok"}
