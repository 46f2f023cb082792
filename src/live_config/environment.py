from __future__ import annotations

import logging
import os
import threading
from typing import Dict, Mapping, MutableMapping, Optional, Protocol

from typing_extensions import runtime_checkable

logger = logging.getLogger("live_config.environment")
logger.addHandler(logging.NullHandler())


@runtime_checkable
class Environment(Protocol):
    def lookup(self, key: str) -> Optional[str]: ...

    def publish(self, key: str, value: str) -> None: ...


def env_var_name(key: str) -> str:
    return key.upper().replace(".", "_").replace("-", "_")


class ProcessEnvironment:
    """
    Environment backed by the process environment variables.

    Lookups try the key as written, then its variable form
    (``db.url`` -> ``DB_URL``).
    """

    def __init__(self, environ: Optional[MutableMapping[str, str]] = None) -> None:
        self._environ = os.environ if environ is None else environ

    def lookup(self, key: str) -> Optional[str]:
        value = self._environ.get(key)
        if value is None:
            name = env_var_name(key)
            if name != key:
                value = self._environ.get(name)
        return value

    def publish(self, key: str, value: str) -> None:
        self._environ[key] = value

    def __repr__(self) -> str:
        return f"<ProcessEnvironment entries={len(self._environ)}>"


class MappingEnvironment:
    """In-memory environment, counting lookups per key."""

    def __init__(self, values: Optional[Mapping[str, str]] = None) -> None:
        self._lock = threading.Lock()
        self._values: Dict[str, str] = dict(values or {})
        self._lookups: Dict[str, int] = {}

    def lookup(self, key: str) -> Optional[str]:
        with self._lock:
            self._lookups[key] = self._lookups.get(key, 0) + 1
            return self._values.get(key)

    def publish(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def lookup_count(self, key: str) -> int:
        with self._lock:
            return self._lookups.get(key, 0)

    @property
    def values(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._values)

    def __repr__(self) -> str:
        return f"<MappingEnvironment entries={len(self._values)}>"
