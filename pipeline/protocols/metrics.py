"""Metrics Protocol - Interface for metrics collection without concrete dependency

This protocol enables dependency injection of metrics into the sync engine,
allowing it to be tested and run without prometheus_client wired up.
"""

from typing import Protocol, Any, ContextManager
from contextlib import contextmanager


class LabeledCounter(Protocol):
    def labels(self, **kwargs: Any) -> "LabeledCounter": ...
    def inc(self, amount: float = 1) -> None: ...


class LabeledHistogram(Protocol):
    def labels(self, **kwargs: Any) -> "LabeledHistogram": ...
    def observe(self, value: float) -> None: ...
    def time(self) -> ContextManager: ...


class MetricsCollector(Protocol):
    """Metrics interface for region sync

    Used by:
    - pipeline/sync_engine.py - per (plugin, data type) reconciliation
    """
    sync_runs: LabeledCounter        # labels: plugin, data_type, status
    items_synced: LabeledCounter     # labels: plugin, data_type, operation
    sync_duration: LabeledHistogram  # labels: plugin, data_type

    def record_error(self, component: str, error: Exception) -> None: ...


class _NullCounter:
    def labels(self, **kwargs: Any) -> "_NullCounter":
        return self

    def inc(self, amount: float = 1) -> None:
        pass


class _NullHistogram:
    def labels(self, **kwargs: Any) -> "_NullHistogram":
        return self

    def observe(self, value: float) -> None:
        pass

    @contextmanager
    def time(self):
        yield


class NullMetrics:
    """No-op metrics for testing or standalone use"""

    def __init__(self):
        self.sync_runs = _NullCounter()
        self.items_synced = _NullCounter()
        self.sync_duration = _NullHistogram()

    def record_error(self, component: str, error: Exception) -> None:
        pass
