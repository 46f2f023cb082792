from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Mapping, Optional, Tuple, Union

from .exceptions import ReloadError
from .loaders import ConfigLoader, FileFormat, default_loaders
from .scheduler import ScheduledTask

if TYPE_CHECKING:
    from .config import Configuration

logger = logging.getLogger("live_config.watch")
logger.addHandler(logging.NullHandler())

__all__ = ["FileWatch", "WatchedFile"]

DELAY_KEY = "config.watch.delay"
PERIOD_KEY = "config.watch.period"
DEFAULT_DELAY = 140
DEFAULT_PERIOD = 61


def _mtime(path: Path) -> Optional[int]:
    try:
        return path.stat().st_mtime_ns
    except OSError:
        return None


@dataclass
class WatchedFile:
    path: Path
    last_modified: int
    format: FileFormat
    missing: bool = False

    @classmethod
    def of(cls, path: Union[str, Path]) -> "WatchedFile":
        path = Path(path)
        # a file missing at start gets a zero baseline and loads once it appears
        return cls(path=path, last_modified=_mtime(path) or 0, format=FileFormat.of(path))

    def current_mtime(self) -> Optional[int]:
        return _mtime(self.path)

    def observe(self, mtime: int) -> None:
        if mtime > self.last_modified:
            self.last_modified = mtime

    def __str__(self) -> str:
        return str(self.path)


class FileWatch:
    """
    Polls a fixed set of files and pushes changed entries into the configuration.

    A reload that fails is logged and skipped; the file's baseline still advances
    so a broken file is not re-read on every tick. Keys loaded from a file that
    later disappears are kept.
    """

    def __init__(
        self,
        config: "Configuration",
        files: Iterable[Union[str, Path]],
        *,
        delay: Optional[float] = None,
        period: Optional[float] = None,
        loaders: Optional[Mapping[FileFormat, ConfigLoader]] = None,
        schedule: bool = True,
    ) -> None:
        self._config = config
        self._files: Tuple[WatchedFile, ...] = tuple(WatchedFile.of(f) for f in files)
        self._loaders = dict(loaders) if loaders is not None else default_loaders()
        self.delay = config.get_long(DELAY_KEY, DEFAULT_DELAY) if delay is None else delay
        self.period = config.get_int(PERIOD_KEY, DEFAULT_PERIOD) if period is None else period
        self._check_lock = threading.Lock()
        self._task: Optional[ScheduledTask] = None
        if schedule:
            self._task = config.schedule(self.delay, self.period, self.check)
        logger.debug("FileWatch init %s", self)

    @property
    def files(self) -> Tuple[WatchedFile, ...]:
        return self._files

    @property
    def task(self) -> Optional[ScheduledTask]:
        return self._task

    def check(self) -> int:
        """Reload every file modified since the last check; return how many reloaded."""
        reloaded = 0
        with self._check_lock:
            for watched in self._files:
                mtime = watched.current_mtime()
                if mtime is None:
                    if watched.missing:
                        logger.debug("Watched config file %s still not readable", watched)
                    else:
                        watched.missing = True
                        logger.warning("Watched config file %s is not readable; keeping its keys", watched)
                    continue
                watched.missing = False
                if mtime <= watched.last_modified:
                    continue
                watched.observe(mtime)
                try:
                    self._reload(watched)
                    reloaded += 1
                except ReloadError as exc:
                    logger.error("%s", exc, exc_info=exc.__cause__)
        return reloaded

    def _reload(self, watched: WatchedFile) -> None:
        logger.debug("reloading configuration from %s", watched)
        loader = self._loaders.get(watched.format)
        if loader is None:
            raise ReloadError(watched.path, f"no loader for {watched.format.value} files")
        try:
            with watched.path.open("r", encoding="utf-8") as stream:
                entries = loader.load(stream)
        except Exception as exc:
            raise ReloadError(watched.path, str(exc)) from exc
        for key, value in entries.items():
            self._config.set(key, value)
        logger.info("Reloaded %d entries from %s", len(entries), watched)

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()

    def __repr__(self) -> str:
        files = [str(f) for f in self._files]
        return f"period:{self.period} delay:{self.delay} files:{files}"
