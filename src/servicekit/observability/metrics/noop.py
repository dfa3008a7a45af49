"""Observability – NoopMetrics implementation."""
from __future__ import annotations

from servicekit.observability.metrics.ports import Counter, Metrics


class _NoopCounter(Counter):
    def add(self, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        pass


class NoopMetrics(Metrics):
    """Silent no-op metrics (the default when no backend is configured)."""

    def counter(self, name: str, description: str = "", unit: str = "") -> Counter:
        return _NoopCounter()


__all__ = ["NoopMetrics"]
