# manus/core/templating/scope.py
"""
Wrappers that expose the resolved data context to pybars templates.

pybars reads values with `context[key]` and falls back to `context.get(key)`;
routing both through these objects lets a missing key fail in strict mode,
keeps the dotted path of every value for helpers such as `pm`, and renders
values without HTML escaping (pybars leaves `strlist` results untouched).
"""
from typing import Any, List, Optional, Sequence

from pybars import strlist

from manus.core.context.values import display_value, join_path
from manus.exceptions import RenderError

STRICT_MODE_SUFFIX = " in strict mode"


class ContextNode:
    """A value read from the data context, together with the path it was read from."""

    def __init__(self, data: Any, path: Sequence[str], strict: bool = True):
        self._data = data
        self._path = list(path)
        self._strict = strict

    def _child(self, key: str) -> Any:
        raise KeyError(key)

    def __getitem__(self, key: Any) -> "ContextNode":
        return wrap(self._child(str(key)), self._path + [str(key)], self._strict)

    def get(self, key: Any, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            if self._strict:
                dotted = join_path(self._path + [str(key)])
                raise RenderError(f'Variable "{dotted}" not found{STRICT_MODE_SUFFIX}', subject=dotted)
            return default

    def __call__(self, this: Any, *args: Any, **kwargs: Any) -> strlist:
        # pybars calls callables it finds; this is how a value gets printed.
        if args or kwargs:
            name = join_path(self._path)
            raise RenderError(f'Helper not defined: "{name}"', subject=name)
        return strlist([display_value(self._data)])

    def __bool__(self) -> bool:
        return bool(self._data)

    def __str__(self) -> str:
        return display_value(self._data)


# pybars falls back to attribute lookup on a missing key, so nodes expose no
# public attributes besides `get`; use unwrap() and path_of() instead.
class ContextMap(ContextNode):
    def _child(self, key: str) -> Any:
        if key not in self._data:
            raise KeyError(key)
        return self._data[key]

    def __contains__(self, key: Any) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self):
        return iter(self._data)


class ContextList(ContextNode):
    def _child(self, key: str) -> Any:
        if not key.isdigit() or int(key) >= len(self._data):
            raise KeyError(key)
        return self._data[int(key)]

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self):
        for index in range(len(self._data)):
            yield self[index]


def wrap(value: Any, path: Sequence[str] = (), strict: bool = True) -> ContextNode:
    if isinstance(value, dict):
        return ContextMap(value, path, strict)
    if isinstance(value, list):
        return ContextList(value, path, strict)
    return ContextNode(value, path, strict)


def unwrap(value: Any) -> Any:
    """Plain Python value of a helper argument (context value, helper output or literal)."""
    if isinstance(value, ContextNode):
        return value._data
    if isinstance(value, strlist):
        return str(value)
    return value


def path_of(value: Any) -> Optional[List[str]]:
    """Path a helper argument was read from, or None for literals and helper output."""
    if isinstance(value, ContextNode):
        return list(value._path)
    return None
