from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class ConfigError(Exception):
    """Base config exception."""


class MissingConfigurationKeyError(ConfigError, KeyError):
    """Raised when a required configuration key has no value."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Missing required configuration parameter [{key}]")

    def __str__(self) -> str:
        # KeyError.__str__ would repr() the message
        return str(self.args[0])


class InvalidNumericFormatError(ConfigError, ValueError):
    """Raised when a present value cannot be parsed as the requested numeric type."""

    def __init__(self, key: Optional[str], value: object, kind: str = "int") -> None:
        self.key = key
        self.value = value
        self.kind = kind
        msg = f"Value {value!r} is not a valid {kind}"
        if key is not None:
            msg += f" (key: {key})"
        super().__init__(msg)


class ReloadError(ConfigError):
    """Raised when a watched file cannot be read or parsed during a reload."""

    def __init__(self, path: Union[str, Path], reason: str = "") -> None:
        self.path = Path(path)
        self.reason = reason
        msg = f"Unable to reload config file {self.path}"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)
