"""Testing helpers – in-memory doubles for the kit's ports."""
from servicekit.testing.fakes import FakeMetricsRegistry

__all__ = ["FakeMetricsRegistry"]
