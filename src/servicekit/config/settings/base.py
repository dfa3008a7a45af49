"""Config settings – Settings base class."""
from __future__ import annotations

import dataclasses
from typing import ClassVar


@dataclasses.dataclass
class Settings:
    """Base class for 12-factor settings.

    Subclasses set ``_prefix``; :class:`EnvSettingsLoader` reads each field
    from ``<PREFIX>_<FIELD>``. Construction runs :meth:`_validate`, so an
    instance built by hand is checked the same way as one loaded from the
    environment.
    """

    _prefix: ClassVar[str] = ""

    def __post_init__(self) -> None:
        self._validate()

    def _validate(self) -> None:
        """Override to add cross-field validation."""


__all__ = ["Settings"]
