from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from apps.api.dependencies import services as service_deps
from apps.api.main import create_app
from apps.api.services.reports import ReportRun, ReportScope, UnknownReportScopeError
from packages.ledger import LedgerSnapshot

STARTED = datetime(2024, 3, 25, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def report_client():
    app = create_app()
    service = MagicMock()

    async def override_service():
        return service

    app.dependency_overrides[service_deps.get_report_service] = override_service

    client = TestClient(app)
    try:
        yield client, service
    finally:
        app.dependency_overrides.clear()


def test_report_states_are_keyed_by_output_file(report_client):
    client, service = report_client
    service.states.return_value = {
        ReportScope.ACCOUNTS: "finished in 0.02s",
        ReportScope.YEARLY: "processing",
        ReportScope.FS: "idle",
    }

    response = client.get("/api/v1/reports")

    assert response.status_code == 200
    assert response.json() == {
        "accounts.csv": "finished in 0.02s",
        "yearly.csv": "processing",
        "fs.csv": "idle",
    }


def test_trigger_all_reports_is_accepted(report_client):
    client, service = report_client
    service.trigger_all.return_value = [
        ReportRun(id=f"run-{scope.value}", scope=scope, started_at=STARTED) for scope in ReportScope
    ]

    response = client.post("/api/v1/reports")

    assert response.status_code == 202
    runs = response.json()["runs"]
    assert [run["scope"] for run in runs] == ["accounts", "yearly", "fs"]
    assert {run["state"] for run in runs} == {"processing"}


def test_trigger_single_report(report_client):
    client, service = report_client
    service.trigger.return_value = ReportRun(id="run-1", scope=ReportScope.FS, started_at=STARTED)

    response = client.post("/api/v1/reports/fs")

    assert response.status_code == 202
    assert response.json()["id"] == "run-1"
    service.trigger.assert_called_once_with("fs")


def test_trigger_unknown_report_is_not_found(report_client):
    client, service = report_client
    service.trigger.side_effect = UnknownReportScopeError("Unknown report scope: balance")

    response = client.post("/api/v1/reports/balance")

    assert response.status_code == 404


def test_report_state_of_single_scope(report_client):
    client, service = report_client
    service.state.return_value = "error: boom"

    response = client.get("/api/v1/reports/yearly")

    assert response.status_code == 200
    assert response.json() == {"scope": "yearly", "state": "error: boom"}
    service.state.assert_called_once_with("yearly")


def test_refresh_snapshot_reports_loaded_files(report_client):
    client, service = report_client
    snapshot = LedgerSnapshot(source_dir=Path("tmp"), files={"a.csv": (), "b.csv": ()}, loaded_at=STARTED)
    service.load_snapshot = AsyncMock(return_value=snapshot)

    response = client.post("/api/v1/reports/snapshot")

    assert response.status_code == 200
    assert response.json()["files"] == ["a.csv", "b.csv"]
    assert response.json()["entries"] == 0
    service.load_snapshot.assert_awaited_once_with(refresh=True)


def test_refresh_snapshot_failure_is_server_error(report_client):
    client, service = report_client
    service.load_snapshot = AsyncMock(side_effect=FileNotFoundError("tmp"))

    response = client.post("/api/v1/reports/snapshot")

    assert response.status_code == 500
