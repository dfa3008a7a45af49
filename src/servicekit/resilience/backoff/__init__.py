"""Resilience – exponential backoff runners."""
from servicekit.resilience.backoff.runner import (
    BACKOFF_COUNTER,
    Backoffer,
    NoopBackoff,
    Runner,
    RunnerOption,
    init_backoff,
    jitter,
    max_backoff,
    max_calls,
    new_runner,
    with_logger,
    with_metrics,
    with_sleep,
)
from servicekit.resilience.backoff.settings import BackoffSettings
from servicekit.resilience.backoff.strategies import ExponentialBackoff, FullJitter, JitterStrategy, NoJitter
from servicekit.resilience.backoff.tenacity_adapter import TenacityBackoff

__all__ = [
    "BACKOFF_COUNTER",
    "BackoffSettings",
    "Backoffer",
    "ExponentialBackoff",
    "FullJitter",
    "JitterStrategy",
    "NoJitter",
    "NoopBackoff",
    "Runner",
    "RunnerOption",
    "TenacityBackoff",
    "init_backoff",
    "jitter",
    "max_backoff",
    "max_calls",
    "new_runner",
    "with_logger",
    "with_metrics",
    "with_sleep",
]
