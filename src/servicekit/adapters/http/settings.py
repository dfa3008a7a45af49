"""HTTP adapter – HTTPClientSettings (env prefix ``HTTP_CLIENT``)."""
from __future__ import annotations

import dataclasses
from typing import ClassVar

from servicekit.config.settings import Settings
from servicekit.config.validation import InvalidSettingValueError


@dataclasses.dataclass
class HTTPClientSettings(Settings):
    """Defaults for :meth:`~servicekit.adapters.http.client.Client.from_settings`.

    ``max_calls = 1`` means a single attempt with no backoff; ``max_calls = 0``
    retries until success or a non-retryable error.
    """

    _prefix: ClassVar[str] = "HTTP_CLIENT"

    base_url: str = ""
    timeout: float = 10.0
    max_calls: int = 1
    initial_delay: float = 1.0
    max_delay: float = 60.0
    jitter: bool = False
    retry_client_timeouts: bool = False

    def _validate(self) -> None:
        if self.timeout <= 0:
            raise InvalidSettingValueError("HTTP_CLIENT_TIMEOUT", self.timeout, "must be positive")
        for name in ("max_calls", "initial_delay", "max_delay"):
            value = getattr(self, name)
            if value < 0:
                raise InvalidSettingValueError(f"HTTP_CLIENT_{name.upper()}", value, "must not be negative")


__all__ = ["HTTPClientSettings"]
