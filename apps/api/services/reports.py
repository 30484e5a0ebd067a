"""Background generation of the ledger reports."""

from __future__ import annotations

import asyncio
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from time import perf_counter
from typing import Callable, Mapping

from opentelemetry import trace

from apps.api.metrics import MetricsRegistry, metrics_registry
from apps.api.metrics.definitions import REPORT_RUN_DURATION, REPORT_RUNS
from packages.ledger import (
    DEFAULT_TAXONOMY,
    FinancialTaxonomy,
    LedgerSnapshot,
    financial_statement_report,
    load_snapshot,
    trial_balance_report,
    yearly_cash_report,
)

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class ReportServiceError(RuntimeError):
    """Base error for report generation issues."""


class UnknownReportScopeError(ReportServiceError):
    """Raised when a report scope is not one of the known reports."""


class ReportScope(str, Enum):
    ACCOUNTS = "accounts"
    YEARLY = "yearly"
    FS = "fs"

    @property
    def output_name(self) -> str:
        return f"{self.value}.csv"


class ReportStatus(str, Enum):
    IDLE = "idle"
    PROCESSING = "processing"
    FINISHED = "finished"
    ERROR = "error"


@dataclass(slots=True)
class ReportRun:
    """Handle of a single report execution."""

    id: str
    scope: ReportScope
    status: ReportStatus = ReportStatus.PROCESSING
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    finished_at: datetime | None = None
    duration: float | None = None
    error: str | None = None
    output_path: Path | None = None
    task: asyncio.Task[ReportRun] | None = field(default=None, repr=False, compare=False)

    @property
    def done(self) -> bool:
        return self.status in (ReportStatus.FINISHED, ReportStatus.ERROR)

    def describe(self) -> str:
        if self.status is ReportStatus.FINISHED:
            return f"finished in {self.duration or 0.0:.2f}s"
        if self.status is ReportStatus.ERROR:
            return f"error: {self.error}"
        return self.status.value

    async def wait(self) -> ReportRun:
        if self.task is not None:
            await self.task
        return self


ReportBuilder = Callable[[LedgerSnapshot, FinancialTaxonomy], str]


def _build_accounts(snapshot: LedgerSnapshot, taxonomy: FinancialTaxonomy) -> str:
    return trial_balance_report(snapshot.entries())


def _build_yearly(snapshot: LedgerSnapshot, taxonomy: FinancialTaxonomy) -> str:
    return yearly_cash_report(snapshot.entries())


def _build_fs(snapshot: LedgerSnapshot, taxonomy: FinancialTaxonomy) -> str:
    return financial_statement_report(snapshot.entries(), taxonomy)


REPORT_BUILDERS: Mapping[ReportScope, ReportBuilder] = {
    ReportScope.ACCOUNTS: _build_accounts,
    ReportScope.YEARLY: _build_yearly,
    ReportScope.FS: _build_fs,
}


class ReportService:
    """Runs ledger reports as asyncio tasks and tracks the latest run per scope.

    The ledger snapshot is read once on first use and held until
    :meth:`load_snapshot` is called with ``refresh=True``. Runs of the same
    scope are not serialised: overlapping runs both write the output file and
    the state reflects whichever run was triggered last.
    """

    def __init__(
        self,
        *,
        input_dir: Path | str,
        output_dir: Path | str,
        taxonomy: FinancialTaxonomy = DEFAULT_TAXONOMY,
        loader: Callable[[Path], LedgerSnapshot] = load_snapshot,
        metrics: MetricsRegistry | None = None,
    ) -> None:
        self._input_dir = Path(input_dir)
        self._output_dir = Path(output_dir)
        self._taxonomy = taxonomy
        self._loader = loader
        self._snapshot: LedgerSnapshot | None = None
        self._snapshot_lock = asyncio.Lock()
        self._runs: dict[ReportScope, ReportRun] = {}
        self._tasks: set[asyncio.Task[ReportRun]] = set()
        registry = metrics or metrics_registry
        self._run_counter = registry.counter(REPORT_RUNS, label_names=("scope", "outcome"))
        self._run_duration = registry.distribution(REPORT_RUN_DURATION, label_names=("scope",))

    @property
    def snapshot(self) -> LedgerSnapshot | None:
        return self._snapshot

    async def load_snapshot(self, *, refresh: bool = False) -> LedgerSnapshot:
        async with self._snapshot_lock:
            if self._snapshot is None or refresh:
                self._snapshot = await asyncio.to_thread(self._loader, self._input_dir)
            return self._snapshot

    @staticmethod
    def parse_scope(scope: str | ReportScope) -> ReportScope:
        try:
            return ReportScope(scope)
        except ValueError:
            raise UnknownReportScopeError(f"Unknown report scope: {scope}") from None

    def trigger(self, scope: str | ReportScope, *, snapshot: LedgerSnapshot | None = None) -> ReportRun:
        """Schedule a run and return its handle without waiting for it."""

        report_scope = self.parse_scope(scope)
        run = ReportRun(id=uuid.uuid4().hex, scope=report_scope)
        self._runs[report_scope] = run

        task = asyncio.create_task(self._execute(run, snapshot), name=f"report-{report_scope.value}-{run.id}")
        run.task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        logger.info("Scheduled %s report run %s", report_scope.value, run.id)
        return run

    def trigger_all(self, *, snapshot: LedgerSnapshot | None = None) -> list[ReportRun]:
        return [self.trigger(scope, snapshot=snapshot) for scope in ReportScope]

    async def run(self, scope: str | ReportScope, *, snapshot: LedgerSnapshot | None = None) -> ReportRun:
        return await self.trigger(scope, snapshot=snapshot).wait()

    def latest_run(self, scope: str | ReportScope) -> ReportRun | None:
        return self._runs.get(self.parse_scope(scope))

    def state(self, scope: str) -> str:
        try:
            report_scope = ReportScope(scope)
        except ValueError:
            return "unknown"
        run = self._runs.get(report_scope)
        return run.describe() if run is not None else ReportStatus.IDLE.value

    def states(self) -> dict[ReportScope, str]:
        return {scope: self.state(scope.value) for scope in ReportScope}

    async def drain(self) -> None:
        """Wait for every run that is still in flight."""

        pending = list(self._tasks)
        if pending:
            await asyncio.gather(*pending)

    async def _execute(self, run: ReportRun, snapshot: LedgerSnapshot | None) -> ReportRun:
        start = perf_counter()
        with tracer.start_as_current_span("reports.run") as span:
            span.set_attribute("report.scope", run.scope.value)
            try:
                data = snapshot if snapshot is not None else await self.load_snapshot()
                output_path = self._output_dir / run.scope.output_name
                await asyncio.to_thread(self._build_and_write, run.scope, data, output_path)
            except Exception as exc:
                run.status = ReportStatus.ERROR
                run.error = str(exc) or type(exc).__name__
                span.record_exception(exc)
                logger.exception("Error generating %s report", run.scope.value)
            else:
                run.status = ReportStatus.FINISHED
                run.output_path = output_path
            finally:
                run.duration = perf_counter() - start
                run.finished_at = datetime.now(timezone.utc)

        outcome = run.status.value
        self._run_counter.inc(labels={"scope": run.scope.value, "outcome": outcome})
        self._run_duration.observe(run.duration, labels={"scope": run.scope.value})
        logger.info("Report %s run %s %s", run.scope.value, run.id, run.describe())
        return run

    def _build_and_write(self, scope: ReportScope, snapshot: LedgerSnapshot, output_path: Path) -> None:
        content = REPORT_BUILDERS[scope](snapshot, self._taxonomy)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content, encoding="utf-8")
