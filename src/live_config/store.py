from __future__ import annotations

import logging
import threading
from collections import deque
from typing import Any, Deque, Dict, Mapping, Optional, Set

from .environment import Environment, ProcessEnvironment
from .exceptions import MissingConfigurationKeyError
from .expression import eval_expression
from .listeners import ChangeListenerRegistry
from .utils import parse_bool, parse_int, parse_long, redact_for_log

logger = logging.getLogger("live_config.store")
logger.addHandler(logging.NullHandler())

__all__ = ["PropertyStore", "REQUIRED"]


class _Absent:
    """Cached "no value anywhere" marker; never returned to callers."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<absent>"


class _Required:
    __slots__ = ()

    def __repr__(self) -> str:
        return "<required>"


_ABSENT = _Absent()
REQUIRED: Any = _Required()


class PropertyStore:
    """
    Concurrent key/value store with miss caching and a boolean cache.

    Reads never lock. Writes to one key (and the boolean cache fill for it) are
    serialized by a per-key lock. Each transition is queued under that lock and
    delivered after it is released, by one dispatching thread per key, so change
    notifications for a key arrive in the order its map updates were applied and
    listeners are free to set other keys.
    """

    def __init__(
        self,
        source: Optional[Mapping[str, Any]] = None,
        *,
        environment: Optional[Environment] = None,
        listeners: Optional[ChangeListenerRegistry] = None,
    ) -> None:
        self._environment: Environment = (
            environment if environment is not None else ProcessEnvironment()
        )
        self._listeners = listeners
        self._values: Dict[str, Any] = {}
        self._bool_cache: Dict[str, bool] = {}
        self._key_locks: Dict[str, threading.RLock] = {}
        self._key_locks_guard = threading.Lock()
        self._pending: Dict[str, Deque[Optional[str]]] = {}
        self._dispatching: Set[str] = set()
        self._dispatch_lock = threading.Lock()
        if source:
            for key, value in source.items():
                if value is not None:
                    self._values[str(key)] = str(value)
        logger.debug("PropertyStore init entries=%d", len(self._values))

    @property
    def environment(self) -> Environment:
        return self._environment

    def _lock_for(self, key: str) -> threading.RLock:
        lock = self._key_locks.get(key)
        if lock is None:
            with self._key_locks_guard:
                lock = self._key_locks.setdefault(key, threading.RLock())
        return lock

    # reads
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Return the value for ``key`` or ``default`` when it has none.

        A miss falls back to the environment once; the result, including
        "nothing found", is cached so later misses do not hit it again.
        """
        value = self._values.get(key)
        if value is None:
            found = self._environment.lookup(key)
            # setdefault keeps a value written by a concurrent set()
            value = self._values.setdefault(key, _ABSENT if found is None else found)
        if value is _ABSENT:
            return default
        return value

    def get_required(self, key: str) -> str:
        value = self.get(key)
        if value is None:
            logger.error("Missing required configuration key %r", key)
            raise MissingConfigurationKeyError(key)
        return value

    def get_bool(self, key: str, default: Any = REQUIRED) -> bool:
        """
        Boolean flag lookup backed by a cache that set() invalidates.

        Absence yields ``default`` (cached like any other result); without a
        default absence raises MissingConfigurationKeyError.
        """
        cached = self._bool_cache.get(key)
        if cached is not None:
            return cached
        with self._lock_for(key):
            cached = self._bool_cache.get(key)
            if cached is not None:
                return cached
            raw = self.get(key)
            if raw is None:
                if default is REQUIRED:
                    raise MissingConfigurationKeyError(key)
                value = bool(default)
            else:
                value = parse_bool(raw)
            self._bool_cache[key] = value
            return value

    def get_int(self, key: str, default: Any = REQUIRED) -> int:
        raw = self.get(key)
        if raw is None:
            if default is REQUIRED:
                raise MissingConfigurationKeyError(key)
            return default
        return parse_int(raw, key)

    def get_long(self, key: str, default: Any = REQUIRED) -> int:
        raw = self.get(key)
        if raw is None:
            if default is REQUIRED:
                raise MissingConfigurationKeyError(key)
            return default
        return parse_long(raw, key)

    # writes
    def set(self, key: str, value: Optional[str]) -> None:
        """
        Set ``key`` to ``value`` after placeholder evaluation; None removes it.

        On a transition the boolean cache entry is dropped under the key's lock;
        change listeners fire once the lock is released.
        """
        resolved = eval_expression(None if value is None else str(value), self)
        with self._lock_for(key):
            if resolved is None:
                old = self._values.pop(key, None)
            else:
                old = self._values.get(key)
                self._values[key] = resolved
            if old is _ABSENT:
                old = None
            if old == resolved:
                return
            self._bool_cache.pop(key, None)
            logger.debug("Store.set key=%r value=%s", key, redact_for_log(key, resolved))
            if self._listeners is None:
                return
            with self._dispatch_lock:
                self._pending.setdefault(key, deque()).append(resolved)
        self._drain(key)

    def _drain(self, key: str) -> None:
        # a thread already delivering for this key picks up what was just queued
        with self._dispatch_lock:
            if key in self._dispatching:
                return
            self._dispatching.add(key)
        try:
            while True:
                with self._dispatch_lock:
                    queue = self._pending.get(key)
                    if not queue:
                        self._pending.pop(key, None)
                        self._dispatching.discard(key)
                        return
                    value = queue.popleft()
                self._listeners.fire(key, value)
        except BaseException:
            with self._dispatch_lock:
                self._dispatching.discard(key)
            raise

    # snapshots
    def as_map(self) -> Dict[str, str]:
        return {k: v for k, v in tuple(self._values.items()) if v is not _ABSENT}

    def export_to_environment(self) -> None:
        snapshot = self.as_map()
        for key, value in snapshot.items():
            self._environment.publish(key, value)
        logger.debug("Exported %d entries to %r", len(snapshot), self._environment)

    def __len__(self) -> int:
        return len(self.as_map())

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key) is not None

    def __repr__(self) -> str:
        return f"<PropertyStore entries={len(self)}>"
