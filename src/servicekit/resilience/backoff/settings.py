"""Resilience – BackoffSettings (env prefix ``BACKOFF``)."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from servicekit.config.settings import Settings
from servicekit.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class BackoffSettings(Settings):
    """Runner configuration read from ``BACKOFF_INITIAL_DELAY`` and friends.

    Delays are in seconds. ``max_calls = 0`` retries forever and
    ``max_delay = 0`` leaves the delay uncapped.
    """

    _prefix: ClassVar[str] = "BACKOFF"

    initial_delay: float = 1.0
    max_delay: float = 60.0
    max_calls: int = 10
    jitter: bool = False

    def _validate(self) -> None:
        for name in ("initial_delay", "max_delay", "max_calls"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSettingValueError(f"BACKOFF_{name.upper()}", value, "must not be negative")
        if self.max_delay and self.max_delay < self.initial_delay:
            raise InvalidSettingValueError(
                "BACKOFF_MAX_DELAY", self.max_delay, "must be 0 or at least BACKOFF_INITIAL_DELAY"
            )


__all__ = ["BackoffSettings"]
