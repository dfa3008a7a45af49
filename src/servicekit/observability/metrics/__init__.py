"""Observability – metrics ports."""
from servicekit.observability.metrics.ports import Counter, Metrics
from servicekit.observability.metrics.noop import NoopMetrics

__all__ = ["Counter", "Metrics", "NoopMetrics"]
