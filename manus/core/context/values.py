# manus/core/context/values.py
"""
Helpers for the data context tree.

The context is the plain structure produced by the JSON/TOML readers: dicts
(insertion ordered), lists, str, int/float, bool and None. Everything here
works on that structure directly.
"""
import copy
import math
from typing import Any, List, Sequence

from manus.core.numbers import format_number
from manus.exceptions import ContextWriteError

EXPRESSION_MARKER = "expr:"

KeyPath = List[str]


def is_expression(value: Any) -> bool:
    """True for text values whose stripped content starts with the expression marker."""
    return isinstance(value, str) and value.strip().startswith(EXPRESSION_MARKER)


def is_number(value: Any) -> bool:
    # bool is an int subclass but never a Number in the context.
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def join_path(path: Sequence[str]) -> str:
    return ".".join(path)


def split_path(path_str: str) -> KeyPath:
    return [part for part in path_str.split(".") if part]


def clone(tree: Any) -> Any:
    return copy.deepcopy(tree)


def _step(node: Any, key: str) -> Any:
    if isinstance(node, dict):
        return node[key]
    if isinstance(node, list) and key.isdigit():
        index = int(key)
        if index < len(node):
            return node[index]
    raise KeyError(key)


def get_at_path(tree: Any, path: Sequence[str]) -> Any:
    """Walks maps by key and lists by integer segment. Raises KeyError when absent."""
    node = tree
    for key in path:
        node = _step(node, key)
    return node


def _replace_in_list(items: List[Any], original: Any, value: Any) -> bool:
    for index, item in enumerate(items):
        if isinstance(item, list):
            if _replace_in_list(item, original, value):
                return True
        elif item == original:
            items[index] = value
            return True
    return False


def set_at_path(tree: Any, path: Sequence[str], value: Any, original: Any = None) -> None:
    """
    Replaces the existing value at `path` with `value`. Never creates keys.

    Expressions nested in lists share the path of the list that holds them, so
    when the target is a list and `original` is given, the first element equal
    to `original` is replaced instead of the list itself.
    """
    if not path:
        if isinstance(tree, list) and original is not None and _replace_in_list(tree, original, value):
            return
        raise ContextWriteError("Key not found")

    try:
        parent = get_at_path(tree, path[:-1])
    except KeyError:
        raise ContextWriteError("Key not found")

    last_key = path[-1]
    if isinstance(parent, dict):
        if last_key not in parent:
            raise ContextWriteError("Key not found")
        current = parent[last_key]
        if isinstance(current, list) and original is not None:
            if _replace_in_list(current, original, value):
                return
            raise ContextWriteError("Key not found")
        parent[last_key] = value
    elif isinstance(parent, list) and last_key.isdigit() and int(last_key) < len(parent):
        parent[int(last_key)] = value
    else:
        raise ContextWriteError("Key not found")


def normalize_number(value: Any) -> Any:
    """Integral floats become ints; everything else is returned unchanged."""
    if isinstance(value, float) and math.isfinite(value) and value.is_integer():
        return int(value)
    return value


def display_value(value: Any) -> str:
    # text used when a context value is written into a document.
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool) or is_number(value):
        return format_number(value)
    if isinstance(value, list):
        return "[" + ", ".join(display_value(item) for item in value) + "]"
    if isinstance(value, dict):
        return "[object]"
    return str(value)
