"""Pipeline Protocols - interfaces injected into the sync engine"""

from pipeline.protocols.metrics import LabeledCounter, LabeledHistogram, MetricsCollector, NullMetrics

__all__ = ["LabeledCounter", "LabeledHistogram", "MetricsCollector", "NullMetrics"]
