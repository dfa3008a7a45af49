"""Testing fakes."""
from servicekit.testing.fakes.metrics import FakeMetricsRegistry

__all__ = ["FakeMetricsRegistry"]
