from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from apps.api.dependencies.services import ReportServiceDep
from apps.api.services.reports import ReportRun, ReportScope, UnknownReportScopeError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/reports", tags=["reports"])


class ReportRunModel(BaseModel):
    id: str
    scope: ReportScope
    state: str
    started_at: datetime

    @classmethod
    def from_run(cls, run: ReportRun) -> "ReportRunModel":
        return cls(id=run.id, scope=run.scope, state=run.describe(), started_at=run.started_at)


class ReportRunsModel(BaseModel):
    runs: list[ReportRunModel]


class ReportStateModel(BaseModel):
    scope: str
    state: str


class SnapshotModel(BaseModel):
    files: list[str]
    entries: int
    loaded_at: datetime


@router.get("", summary="State of every report, keyed by output file")
async def report_states(service: ReportServiceDep) -> dict[str, str]:
    return {scope.output_name: state for scope, state in service.states().items()}


@router.post("", response_model=ReportRunsModel, status_code=status.HTTP_202_ACCEPTED)
async def trigger_all_reports(service: ReportServiceDep) -> ReportRunsModel:
    runs = service.trigger_all()
    return ReportRunsModel(runs=[ReportRunModel.from_run(run) for run in runs])


@router.post("/snapshot", response_model=SnapshotModel, summary="Reload the ledger input directory")
async def refresh_snapshot(service: ReportServiceDep) -> SnapshotModel:
    try:
        snapshot = await service.load_snapshot(refresh=True)
    except OSError as exc:
        logger.warning("Could not reload ledger snapshot: %s", exc)
        raise HTTPException(status_code=500, detail=f"Could not load ledger files: {exc}") from exc
    return SnapshotModel(files=list(snapshot.files), entries=snapshot.entry_count, loaded_at=snapshot.loaded_at)


@router.get("/{scope}", response_model=ReportStateModel)
async def report_state(scope: str, service: ReportServiceDep) -> ReportStateModel:
    return ReportStateModel(scope=scope, state=service.state(scope))


@router.post("/{scope}", response_model=ReportRunModel, status_code=status.HTTP_202_ACCEPTED)
async def trigger_report(scope: str, service: ReportServiceDep) -> ReportRunModel:
    try:
        run = service.trigger(scope)
    except UnknownReportScopeError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ReportRunModel.from_run(run)
