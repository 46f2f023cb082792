from __future__ import annotations

import logging
import threading
from pathlib import Path
from types import TracebackType
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Type, Union

from .environment import Environment, ProcessEnvironment
from .expression import ExpressionEval
from .listeners import ChangeListenerRegistry, Handler, ValueKind
from .loaders import ConfigLoader, FileFormat, load_file
from .scheduler import ScheduledTask, Scheduler
from .store import REQUIRED, PropertyStore
from .watch import FileWatch

logger = logging.getLogger("live_config.config")
logger.addHandler(logging.NullHandler())


class Configuration:
    """
    Runtime configuration: typed accessors over a PropertyStore, change
    listeners, and a lazily started scheduler for file watching.

    Use set() to change values; listeners registered with on_change*() fire on
    every transition of their key.
    """

    def __init__(
        self,
        source: Optional[Mapping[str, Any]] = None,
        *,
        environment: Optional[Environment] = None,
    ) -> None:
        self._listeners = ChangeListenerRegistry()
        self._store = PropertyStore(
            source,
            environment=environment if environment is not None else ProcessEnvironment(),
            listeners=self._listeners,
        )
        self._scheduler: Optional[Scheduler] = None
        self._scheduler_lock = threading.Lock()
        self._watches: List[FileWatch] = []

    @classmethod
    def from_files(
        cls,
        *paths: Union[str, Path],
        environment: Optional[Environment] = None,
        watch: bool = True,
        loaders: Optional[Mapping[FileFormat, ConfigLoader]] = None,
    ) -> "Configuration":
        """
        Build a configuration from property/YAML files, later files winning.

        Placeholders are evaluated against the merged entries and the
        environment. With ``watch`` the loaded files are polled for changes.
        """
        env = environment if environment is not None else ProcessEnvironment()
        merged: Dict[str, str] = {}
        loaded: List[Path] = []
        for p in paths:
            path = Path(p)
            if not path.is_file():
                logger.warning("Config file %s not found; skipping", path)
                continue
            merged.update(load_file(path, loaders))
            loaded.append(path)
            logger.info("Loaded config file %s", path)

        def lookup(key: str) -> Optional[str]:
            value = merged.get(key)
            return value if value is not None else env.lookup(key)

        config = cls(ExpressionEval(lookup).eval_map(merged), environment=env)
        if watch and loaded:
            config.watch_files(loaded, loaders=loaders)
        return config

    # reads
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._store.get(key, default)

    def get_optional(self, key: str) -> Optional[str]:
        return self._store.get(key)

    def get_required(self, key: str) -> str:
        return self._store.get_required(key)

    def get_bool(self, key: str, default: Any = REQUIRED) -> bool:
        return self._store.get_bool(key, default)

    def get_int(self, key: str, default: Any = REQUIRED) -> int:
        return self._store.get_int(key, default)

    def get_long(self, key: str, default: Any = REQUIRED) -> int:
        return self._store.get_long(key, default)

    # writes
    def set(self, key: str, value: Optional[str]) -> None:
        self._store.set(key, value)

    def eval(self, text: Optional[str]) -> Optional[str]:
        return ExpressionEval(self._store).eval(text)

    def eval_map(self, mapping: Mapping[str, str]) -> Dict[str, str]:
        """Evaluate every value, resolving keys from ``mapping`` first, then this config."""

        def lookup(key: str) -> Optional[str]:
            value = mapping.get(key)
            return value if value is not None else self._store.get(key)

        return ExpressionEval(lookup).eval_map(mapping)

    # change listeners
    def on_change(self, key: str, handler: Handler) -> None:
        self._listeners.register(key, ValueKind.STRING, handler)

    def on_change_int(self, key: str, handler: Handler) -> None:
        self._listeners.register(key, ValueKind.INT, handler)

    def on_change_long(self, key: str, handler: Handler) -> None:
        self._listeners.register(key, ValueKind.LONG, handler)

    def on_change_bool(self, key: str, handler: Handler) -> None:
        self._listeners.register(key, ValueKind.BOOL, handler)

    # snapshots
    def as_map(self) -> Dict[str, str]:
        return self._store.as_map()

    def export_to_environment(self) -> None:
        self._store.export_to_environment()

    def size(self) -> int:
        return len(self._store)

    # scheduling
    @property
    def scheduler(self) -> Scheduler:
        with self._scheduler_lock:
            if self._scheduler is None:
                self._scheduler = Scheduler()
            return self._scheduler

    def schedule(self, initial_delay: float, period: float, task: Callable[[], None]) -> ScheduledTask:
        return self.scheduler.schedule(initial_delay, period, task)

    def watch_files(self, files: List[Union[str, Path]], **kwargs: Any) -> FileWatch:
        watch = FileWatch(self, files, **kwargs)
        self._watches.append(watch)
        logger.info("Watching config files %s", watch)
        return watch

    @property
    def watches(self) -> List[FileWatch]:
        return list(self._watches)

    def shutdown(self) -> None:
        """Stop the scheduler, if one was started."""
        with self._scheduler_lock:
            scheduler, self._scheduler = self._scheduler, None
        if scheduler is not None:
            scheduler.shutdown()
            logger.info("Configuration scheduler shut down.")

    def __repr__(self) -> str:
        return f"<Configuration entries={self.size()} watches={self._watches}>"

    def __enter__(self) -> "Configuration":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_value: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.shutdown()

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._store.as_map().keys()))

    def __getitem__(self, key: str) -> str:
        return self._store.get_required(key)

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:
        return len(self._store)
