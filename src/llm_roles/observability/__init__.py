"""Metrics hooks. The package never talks to a metrics backend directly."""

from . import names
from .base import InMemoryMetricsHook, MetricsHook, NoOpMetricsHook

__all__ = [
    "InMemoryMetricsHook",
    "MetricsHook",
    "NoOpMetricsHook",
    "names",
]
