"""Config – 12-factor settings and loaders."""

from servicekit.config.settings import EnvSettingsLoader, Settings, SettingsFactory, SettingsLoader
from servicekit.config.validation import ConfigError, InvalidSettingValueError, MissingRequiredSettingError

__all__ = [
    "ConfigError",
    "EnvSettingsLoader",
    "InvalidSettingValueError",
    "MissingRequiredSettingError",
    "Settings",
    "SettingsFactory",
    "SettingsLoader",
]
