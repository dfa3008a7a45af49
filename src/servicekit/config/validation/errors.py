"""Config validation – errors raised while loading or checking settings."""
from servicekit.kernel.errors import BaseError


class ConfigError(BaseError):
    """Settings could not be loaded or constructed."""
    default_code = "config_error"


class MissingRequiredSettingError(ConfigError):
    """A field without a default has no value in any source."""
    default_code = "missing_required_setting"

    def __init__(self, setting_name: str) -> None:
        super().__init__(f"required setting {setting_name} is missing")
        self.setting_name = setting_name


class InvalidSettingValueError(ConfigError):
    """A value could not be coerced, or failed ``Settings._validate``."""
    default_code = "invalid_setting_value"

    def __init__(self, setting_name: str, value: object, reason: str) -> None:
        super().__init__(f"setting {setting_name}={value!r}: {reason}")
        self.setting_name = setting_name


__all__ = ["ConfigError", "InvalidSettingValueError", "MissingRequiredSettingError"]
