from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Literal, Optional

from .utils import parse_bool, parse_int, parse_long

logger = logging.getLogger("live_config.listeners")
logger.addHandler(logging.NullHandler())

Handler = Callable[[Any], None]


class ValueKind(Enum):
    STRING = "string"
    INT = "int"
    LONG = "long"
    BOOL = "bool"


def convert(kind: ValueKind, raw: str, key: Optional[str] = None) -> Any:
    """Convert a raw value into the type a handler of ``kind`` expects."""
    if kind is ValueKind.INT:
        return parse_int(raw, key)
    if kind is ValueKind.LONG:
        return parse_long(raw, key)
    if kind is ValueKind.BOOL:
        return parse_bool(raw)
    return raw


@dataclass(frozen=True)
class ChangeCallback:
    kind: ValueKind
    handler: Handler

    def fire(self, key: str, value: Optional[str]) -> None:
        # removal is delivered as None to every kind
        self.handler(None if value is None else convert(self.kind, value, key))


class ChangeListenerRegistry:
    """
    Per-key change callbacks, fired in registration order.

    Each callback is isolated: a failing conversion or handler is logged and the
    remaining callbacks for the key still run.
    """

    def __init__(self, failure_mode: Literal["ignore", "log"] = "log") -> None:
        if failure_mode not in ("ignore", "log"):
            raise ValueError("failure_mode must be one of 'ignore', 'log'")
        self._failure_mode = failure_mode
        self._lock = threading.Lock()
        self._callbacks: Dict[str, List[ChangeCallback]] = {}

    def register(self, key: str, kind: ValueKind, handler: Handler) -> None:
        if not callable(handler):
            raise TypeError("Change handler must be callable")
        if not isinstance(kind, ValueKind):
            raise TypeError(f"kind must be a ValueKind, got {type(kind)!r}")
        callback = ChangeCallback(kind, handler)
        with self._lock:
            callbacks = self._callbacks.setdefault(key, [])
            if callback in callbacks:
                logger.debug("Change handler already registered key=%r kind=%s", key, kind.name)
                return
            callbacks.append(callback)
        logger.debug("Change handler registered key=%r kind=%s", key, kind.name)

    def fire(self, key: str, value: Optional[str]) -> None:
        with self._lock:
            callbacks = tuple(self._callbacks.get(key, ()))
        for callback in callbacks:
            try:
                callback.fire(key, value)
            except Exception as exc:
                if self._failure_mode == "log":
                    logger.error(
                        "Change handler %r (%s) failed for key=%r: %s",
                        callback.handler,
                        callback.kind.name,
                        key,
                        exc,
                    )
                else:
                    logger.debug("Change handler %r failed but ignored: %s", callback.handler, exc)

    def listener_count(self, key: str) -> int:
        with self._lock:
            return len(self._callbacks.get(key, ()))

    def clear(self) -> None:
        with self._lock:
            self._callbacks.clear()
