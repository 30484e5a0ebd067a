"""Text exposition of the registry for scraping."""
from __future__ import annotations

from .base import CounterMetric, Metric, MetricsRegistry


def _label_text(metric: Metric, values: tuple[str, ...]) -> str:
    if not values:
        return ""
    pairs = [f'{name}="{value}"' for name, value in zip(metric.label_names, values)]
    return "{" + ",".join(pairs) + "}"


def render_prometheus(registry: MetricsRegistry) -> str:
    """Render every metric in Prometheus text format.

    Distributions are exposed as summaries without quantiles.
    """

    lines: list[str] = []
    for metric in registry.metrics():
        metric_type = "counter" if isinstance(metric, CounterMetric) else "summary"
        lines.append(f"# HELP {metric.name} {metric.description}")
        lines.append(f"# TYPE {metric.name} {metric_type}")
        for labels, values in sorted(metric.snapshot().items()):
            label_text = _label_text(metric, labels)
            if "value" in values:
                lines.append(f"{metric.name}{label_text} {values['value']}")
            else:
                lines.append(f"{metric.name}_count{label_text} {values['count']}")
                lines.append(f"{metric.name}_sum{label_text} {values['sum']}")
    return "\n".join(lines) + ("\n" if lines else "")
