"""Config settings – 12-factor env-based configuration."""
from servicekit.config.settings.base import Settings
from servicekit.config.settings.factory import SettingsFactory
from servicekit.config.settings.loaders import EnvSettingsLoader, SettingsLoader

__all__ = ["EnvSettingsLoader", "Settings", "SettingsFactory", "SettingsLoader"]
