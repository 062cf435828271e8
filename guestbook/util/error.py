"""Errors raised while wiring the application."""


class UtilError(Exception):
    """Base error for startup and wiring failures."""


class ConfigurationError(UtilError):
    """A setting is missing or unusable in the current environment."""

    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"{setting} {reason}")
