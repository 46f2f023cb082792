from __future__ import annotations

import logging
import re
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional, Protocol, TextIO, Tuple, Union

import yaml
from typing_extensions import runtime_checkable

logger = logging.getLogger("live_config.loaders")
logger.addHandler(logging.NullHandler())

__all__ = [
    "ConfigLoader",
    "FileFormat",
    "PropertiesLoader",
    "YamlLoader",
    "default_loaders",
    "load_file",
]


@runtime_checkable
class ConfigLoader(Protocol):
    def load(self, stream: TextIO) -> Dict[str, str]: ...


class FileFormat(Enum):
    PROPERTIES = "properties"
    YAML = "yaml"

    @classmethod
    def of(cls, path: Union[str, Path]) -> "FileFormat":
        suffix = Path(path).suffix.lower()
        if suffix in (".yaml", ".yml"):
            return cls.YAML
        return cls.PROPERTIES


# properties

_WHITESPACE = " \t\f"
_SEPARATORS = "=:"
_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_ESCAPES = {"t": "\t", "n": "\n", "r": "\r", "f": "\f"}


def _logical_lines(text: str) -> Iterator[str]:
    pending: List[str] = []
    # only CR, LF and CRLF end a line; \f and other separators stay in the value
    for raw in _LINE_BREAK.split(text):
        line = raw.lstrip(_WHITESPACE)
        if not pending and (not line or line[0] in "#!"):
            continue
        trailing = len(line) - len(line.rstrip("\\"))
        if trailing % 2 == 1:
            pending.append(line[:-1])
            continue
        pending.append(line)
        yield "".join(pending)
        pending = []
    if pending:
        yield "".join(pending)


def _unescape(text: str) -> str:
    if "\\" not in text:
        return text
    out: List[str] = []
    i, n = 0, len(text)
    while i < n:
        ch = text[i]
        if ch != "\\" or i + 1 >= n:
            out.append(ch)
            i += 1
            continue
        nxt = text[i + 1]
        if nxt == "u":
            digits = text[i + 2 : i + 6]
            if len(digits) != 4:
                raise ValueError(f"Malformed \\uxxxx encoding: {text[i:]!r}")
            try:
                out.append(chr(int(digits, 16)))
            except ValueError as e:
                raise ValueError(f"Malformed \\uxxxx encoding: \\u{digits}") from e
            i += 6
            continue
        out.append(_ESCAPES.get(nxt, nxt))
        i += 2
    return "".join(out)


def _split_entry(line: str) -> Tuple[str, str]:
    i, n = 0, len(line)
    while i < n:
        ch = line[i]
        if ch == "\\":
            i += 2
            continue
        if ch in _SEPARATORS or ch in _WHITESPACE:
            break
        i += 1
    i = min(i, n)
    j = i
    while j < n and line[j] in _WHITESPACE:
        j += 1
    if j < n and line[j] in _SEPARATORS:
        j += 1
        while j < n and line[j] in _WHITESPACE:
            j += 1
    return _unescape(line[:i]), _unescape(line[j:])


class PropertiesLoader:
    """
    Line-oriented ``key=value`` loader.

    Supports '#'/'!' comments, '=', ':' or whitespace separators, backslash line
    continuations and the usual escapes (including \\uXXXX).
    """

    def parse(self, text: str) -> Dict[str, str]:
        entries: Dict[str, str] = {}
        for line in _logical_lines(text):
            key, value = _split_entry(line)
            entries[key] = value
        return entries

    def load(self, stream: TextIO) -> Dict[str, str]:
        return self.parse(stream.read())


# yaml


def _scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class YamlLoader:
    """YAML loader flattening nested mappings into dotted keys."""

    def _flatten(self, data: Mapping[Any, Any], parent_key: str = "") -> Dict[str, str]:
        items: Dict[str, str] = {}
        for k, v in data.items():
            new_key = f"{parent_key}.{k}" if parent_key else str(k)
            if isinstance(v, Mapping):
                items.update(self._flatten(v, new_key))
            elif isinstance(v, (list, tuple)):
                items[new_key] = ",".join(_scalar(x) for x in v if x is not None)
            elif v is not None:
                items[new_key] = _scalar(v)
        return items

    def load(self, stream: TextIO) -> Dict[str, str]:
        data = yaml.safe_load(stream)
        if data is None:
            return {}
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected a YAML mapping at document root, got {type(data).__name__}")
        return self._flatten(data)


def default_loaders() -> Dict[FileFormat, ConfigLoader]:
    return {FileFormat.PROPERTIES: PropertiesLoader(), FileFormat.YAML: YamlLoader()}


def load_file(
    path: Union[str, Path], loaders: Optional[Mapping[FileFormat, ConfigLoader]] = None
) -> Dict[str, str]:
    """Read ``path`` with the loader registered for its format."""
    path = Path(path)
    fmt = FileFormat.of(path)
    loader = (loaders or default_loaders()).get(fmt)
    if loader is None:
        raise ValueError(f"No loader registered for {fmt.value} file {path}")
    with path.open("r", encoding="utf-8") as stream:
        entries = loader.load(stream)
    logger.debug("Loaded %d entries from %s", len(entries), path)
    return entries
