"""Counter and distribution primitives and the registry that holds them."""
from __future__ import annotations

from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from threading import Lock
from typing import Iterable, Mapping, MutableMapping, Tuple, Type, TypeVar

LabelValues = Tuple[str, ...]


class Metric(ABC):
    """Named metric with an optional fixed set of label names."""

    def __init__(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> None:
        self.name = name
        self.description = description
        self.label_names: Tuple[str, ...] = tuple(label_names or ())
        self._lock = Lock()

    def _label_values(self, labels: Mapping[str, str] | None) -> LabelValues:
        provided = dict(labels or {})
        if set(provided) != set(self.label_names):
            raise ValueError(
                f"Metric '{self.name}' expects labels {self.label_names}, got {tuple(sorted(provided))}"
            )
        return tuple(str(provided[label]) for label in self.label_names)

    @abstractmethod
    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        """Return the current values keyed by label values."""


class CounterMetric(Metric):
    """Monotonic counter."""

    def __init__(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: MutableMapping[LabelValues, float] = defaultdict(float)

    def inc(self, amount: float = 1.0, *, labels: Mapping[str, str] | None = None) -> None:
        if amount < 0:
            raise ValueError("Counters can only be incremented")
        key = self._label_values(labels)
        with self._lock:
            self._values[key] += amount

    def value(self, *, labels: Mapping[str, str] | None = None) -> float:
        key = self._label_values(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {key: {"value": value} for key, value in self._values.items()}


@dataclass
class DistributionStats:
    count: int = 0
    total: float = 0.0
    min: float | None = None
    max: float | None = None

    def observe(self, value: float) -> None:
        self.count += 1
        self.total += value
        self.min = value if self.min is None else min(self.min, value)
        self.max = value if self.max is None else max(self.max, value)

    def to_mapping(self) -> Mapping[str, float]:
        return {
            "count": float(self.count),
            "sum": self.total,
            "min": self.min if self.min is not None else 0.0,
            "max": self.max if self.max is not None else 0.0,
        }


class DistributionMetric(Metric):
    """Summary statistics of observed values, e.g. durations."""

    def __init__(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> None:
        super().__init__(name, description=description, label_names=label_names)
        self._values: MutableMapping[LabelValues, DistributionStats] = defaultdict(DistributionStats)

    def observe(self, value: float, *, labels: Mapping[str, str] | None = None) -> None:
        key = self._label_values(labels)
        with self._lock:
            self._values[key].observe(value)

    def snapshot(self) -> Mapping[LabelValues, Mapping[str, float]]:
        with self._lock:
            return {key: stats.to_mapping() for key, stats in self._values.items()}


M = TypeVar("M", bound=Metric)


class MetricsRegistry:
    """Metrics keyed by name; asking twice for a name returns the same metric."""

    def __init__(self) -> None:
        self._metrics: dict[str, Metric] = {}
        self._lock = Lock()

    def _register(
        self, kind: Type[M], name: str, description: str, label_names: Iterable[str] | None
    ) -> M:
        with self._lock:
            metric = self._metrics.setdefault(
                name, kind(name, description=description, label_names=label_names)
            )
        if type(metric) is not kind:
            raise TypeError(f"Metric '{name}' is already registered as {type(metric).__name__}")
        return metric

    def counter(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> CounterMetric:
        return self._register(CounterMetric, name, description, label_names)

    def distribution(
        self, name: str, *, description: str = "", label_names: Iterable[str] | None = None
    ) -> DistributionMetric:
        return self._register(DistributionMetric, name, description, label_names)

    def metrics(self) -> Tuple[Metric, ...]:
        with self._lock:
            return tuple(self._metrics.values())
