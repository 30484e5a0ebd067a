"""Metric definitions used across the application."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class MetricDefinition:
    """Describe a metric that should exist in the registry."""

    name: str
    metric_type: str
    description: str
    label_names: Tuple[str, ...] = ()


TICKETS_CREATED = "tickets_created_total"
TICKET_CONFLICTS = "ticket_conflicts_total"
REPORT_RUNS = "report_runs_total"
REPORT_RUN_DURATION = "report_run_duration_seconds"

DEFAULT_METRIC_DEFINITIONS: Tuple[MetricDefinition, ...] = (
    MetricDefinition(
        name=TICKETS_CREATED,
        metric_type="counter",
        description="Tickets created, by ticket type.",
        label_names=("type",),
    ),
    MetricDefinition(
        name=TICKET_CONFLICTS,
        metric_type="counter",
        description="Ticket creations rejected with a conflict, by ticket type.",
        label_names=("type",),
    ),
    MetricDefinition(
        name=REPORT_RUNS,
        metric_type="counter",
        description="Completed ledger report runs, by scope and outcome.",
        label_names=("scope", "outcome"),
    ),
    MetricDefinition(
        name=REPORT_RUN_DURATION,
        metric_type="distribution",
        description="Duration of ledger report runs in seconds.",
        label_names=("scope",),
    ),
)
