"""
Prometheus Metrics Module

Instrumentation for region sync:
- Sync runs per plugin and data type
- Records created/updated
- Reconciliation duration
- Error tracking

Usage:
    from pipeline.metrics import metrics
    metrics.items_synced.labels(plugin="california", data_type="meetings", operation="created").inc(3)
    with metrics.sync_duration.labels(plugin="federal", data_type="campaign_finance").time():
        await engine.sync_all()
"""

from prometheus_client import Counter, Histogram, generate_latest, REGISTRY


class CivicSyncMetrics:
    """Centralized metrics for the region sync pipeline"""

    def __init__(self):
        self.sync_runs = Counter(
            'civicsync_sync_runs_total',
            'Reconciliation attempts per plugin and data type',
            ['plugin', 'data_type', 'status']
        )

        self.items_synced = Counter(
            'civicsync_items_synced_total',
            'Records written by reconciliation',
            ['plugin', 'data_type', 'operation']  # operation: created/updated
        )

        self.sync_duration = Histogram(
            'civicsync_sync_duration_seconds',
            'Fetch, diff and write duration for one data type',
            ['plugin', 'data_type'],
            buckets=[0.5, 1, 5, 10, 30, 60, 300, 900]
        )

        self.errors = Counter(
            'civicsync_errors_total',
            'Errors by component and type',
            ['component', 'error_type']
        )

    def record_error(self, component: str, error: Exception):
        """Record an error

        Args:
            component: Component name (sync/registry/loader/database)
            error: Exception instance
        """
        error_type = type(error).__name__
        self.errors.labels(component=component, error_type=error_type).inc()


# Global metrics instance
metrics = CivicSyncMetrics()


def get_metrics_text() -> str:
    """Get Prometheus metrics in text format"""
    return generate_latest(REGISTRY).decode('utf-8')
