from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger("live_config.expression")
logger.addHandler(logging.NullHandler())

__all__ = [
    "ExpressionEval",
    "Lookup",
    "as_lookup",
    "eval_expression",
]

Lookup = Callable[[str], Optional[str]]

_START = "${"
_END = "}"
_DEFAULT_SEPARATOR = ":"


def as_lookup(source: Any) -> Lookup:
    """
    Normalize a lookup source into a ``key -> Optional[str]`` callable.

    Accepts a mapping, anything exposing ``get(key)`` (such as a PropertyStore),
    or a plain callable.
    """
    getter = getattr(source, "get", None)
    if callable(getter):
        return getter
    if callable(source):
        return source
    raise TypeError(f"Unsupported lookup source: {type(source)!r}")


def eval_expression(text: Optional[str], lookup: Any) -> Optional[str]:
    """
    Replace every ``${key}`` / ``${key:default}`` placeholder in ``text``.

    The key ends at the first ':'; the rest of the placeholder is the default,
    taken verbatim. An unresolved key without a default becomes "".
    """
    if text is None:
        return None
    if _START not in text:
        return text

    resolve = as_lookup(lookup)
    out: List[str] = []
    pos = 0
    while True:
        start = text.find(_START, pos)
        if start == -1:
            out.append(text[pos:])
            break
        end = _matching_end(text, start + len(_START))
        if end == -1:
            # unterminated placeholder, keep the remainder as written
            out.append(text[pos:])
            break
        out.append(text[pos:start])
        out.append(_evaluate(text[start + len(_START) : end], resolve))
        pos = end + len(_END)
    return "".join(out)


def _matching_end(text: str, pos: int) -> int:
    depth = 0
    for i in range(pos, len(text)):
        ch = text[i]
        if ch == "{":
            depth += 1
        elif ch == _END:
            if depth == 0:
                return i
            depth -= 1
    return -1


def _evaluate(expression: str, resolve: Lookup) -> str:
    key, sep, default = expression.partition(_DEFAULT_SEPARATOR)
    value = resolve(key)
    if value is not None:
        return value
    if sep:
        return default
    logger.debug("Unresolved placeholder key=%r substituted with empty string", key)
    return ""


class ExpressionEval:
    """Evaluator bound to one lookup source."""

    def __init__(self, lookup: Any) -> None:
        self._lookup = as_lookup(lookup)

    def eval(self, text: Optional[str]) -> Optional[str]:
        return eval_expression(text, self._lookup)

    def eval_map(self, mapping: Mapping[str, str]) -> Dict[str, str]:
        out: Dict[str, str] = {}
        for key, value in mapping.items():
            evaluated = self.eval(value)
            if evaluated is not None:
                out[key] = evaluated
        return out
