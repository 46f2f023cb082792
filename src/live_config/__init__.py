"""
live_config: a runtime configuration store with live reload.

- Typed accessors over a concurrent key/value store with miss caching.
- ``${key:default}`` placeholder substitution on every write.
- Per-key change listeners fired on every value transition.
- Polling file watch that hot-reloads property and YAML files.
"""

from __future__ import annotations

from live_config.config import Configuration
from live_config.environment import Environment, MappingEnvironment, ProcessEnvironment
from live_config.exceptions import (
    ConfigError,
    InvalidNumericFormatError,
    MissingConfigurationKeyError,
    ReloadError,
)
from live_config.expression import ExpressionEval, eval_expression
from live_config.listeners import ChangeListenerRegistry, ValueKind
from live_config.loaders import ConfigLoader, FileFormat, PropertiesLoader, YamlLoader
from live_config.scheduler import ScheduledTask, Scheduler
from live_config.store import PropertyStore
from live_config.watch import FileWatch, WatchedFile

__all__ = [
    "Configuration",
    "PropertyStore",
    "Environment",
    "ProcessEnvironment",
    "MappingEnvironment",
    "ConfigError",
    "MissingConfigurationKeyError",
    "InvalidNumericFormatError",
    "ReloadError",
    "eval_expression",
    "ExpressionEval",
    "ChangeListenerRegistry",
    "ValueKind",
    "ConfigLoader",
    "FileFormat",
    "PropertiesLoader",
    "YamlLoader",
    "Scheduler",
    "ScheduledTask",
    "FileWatch",
    "WatchedFile",
]
