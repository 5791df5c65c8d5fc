# src/llm_roles/observability/base.py

from collections import defaultdict
from typing import Protocol

Labels = dict[str, str]
Series = tuple[str, tuple[tuple[str, str], ...]]


class MetricsHook(Protocol):
    """Sink for client metrics. Names live in ``llm_roles.observability.names``.

    Implementations must not raise: a failing hook would turn a successful
    model call into an error.
    """

    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None: ...

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None: ...

    def record_gauge(
        self, name: str, value: float, labels: Labels | None = None
    ) -> None: ...


class NoOpMetricsHook:
    """Default hook. Discards everything."""

    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None:
        pass

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None:
        pass

    def record_gauge(
        self, name: str, value: float, labels: Labels | None = None
    ) -> None:
        pass


def _series(name: str, labels: Labels | None) -> Series:
    return name, tuple(sorted((labels or {}).items()))


class InMemoryMetricsHook:
    """Keeps every metric in process memory, keyed by name and labels.

    Useful for tests and for quick inspection in scripts. Not bounded.
    """

    def __init__(self) -> None:
        self.counters: dict[Series, int] = defaultdict(int)
        self.gauges: dict[Series, float] = {}
        self.latencies: dict[Series, list[float]] = defaultdict(list)

    def record_latency(
        self, name: str, value_ms: float, labels: Labels | None = None
    ) -> None:
        self.latencies[_series(name, labels)].append(value_ms)

    def increment(
        self, name: str, value: int = 1, labels: Labels | None = None
    ) -> None:
        self.counters[_series(name, labels)] += value

    def record_gauge(
        self, name: str, value: float, labels: Labels | None = None
    ) -> None:
        self.gauges[_series(name, labels)] = value

    def counter(self, name: str, labels: Labels | None = None) -> int:
        return self.counters.get(_series(name, labels), 0)

    def gauge(self, name: str, labels: Labels | None = None) -> float | None:
        return self.gauges.get(_series(name, labels))
