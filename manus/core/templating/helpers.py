# manus/core/templating/helpers.py
"""
Handlebars helpers callable from placeholders, e.g. "{{pm 2 results.value}}".

pybars calls every helper as helper(this, *args): `this` is the current
scope and each argument is a context value (see scope.py), the output of
a sub-expression or a literal.
"""
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from manus.core.context.values import display_value, get_at_path, is_number
from manus.core.numbers import (
    add_separators,
    format_number,
    as_float,
    as_integer,
    round_value,
    separate_numbers_in_text,
)
from manus.exceptions import RenderError

from .scope import path_of, unwrap


@dataclass
class Param:
    value: Any
    path: Optional[List[str]] = None


def _params(args: tuple) -> List[Param]:
    return [Param(value=unwrap(arg), path=path_of(arg)) for arg in args]


def _root_data(this: Any) -> Any:
    # the top-level data, whatever block the helper is called from.
    return unwrap(getattr(this, "root", this))


def _describe(value: Any) -> str:
    try:
        return json.dumps(value)
    except (TypeError, ValueError):
        return str(value)


def _integer_param(param: Param) -> int:
    parsed = as_integer(param.value)
    if parsed is None:
        raise RenderError(f"Could not parse {_describe(param.value)} as an integer.")
    return parsed


def _float_param(param: Param) -> float:
    parsed = as_float(param.value)
    if parsed is None:
        raise RenderError(f"Could not parse {_describe(param.value)} as a floating point value.")
    return parsed


def _single_string(name: str, params: List[Param]) -> str:
    if len(params) != 1:
        raise RenderError(f"{name} takes exactly one argument. {len(params)} were given.")
    value = params[0].value
    if not isinstance(value, str):
        raise RenderError(f"{name} expects a string, got {_describe(value)}.")
    return value


def upper_helper(this: Any, *args: Any) -> str:
    return _single_string("upper", _params(args)).upper()


def lower_helper(this: Any, *args: Any) -> str:
    return _single_string("lower", _params(args)).lower()


def round_helper(this: Any, *args: Any) -> str:
    """
    Round a value to the nearest decimal.

    One argument rounds the value to an integer; with two the first is the
    number of decimals (negative rounds to tens, hundreds, ...).
    """
    params = _params(args)
    if not params:
        raise RenderError("Could not read the first argument.")
    if len(params) > 2:
        raise RenderError("round only takes two arguments. More were given.")

    if len(params) == 2:
        decimals = _integer_param(params[0])
        value = _float_param(params[1])
    else:
        decimals = 0
        value = _float_param(params[0])
    return format_number(round_value(value, decimals))


def roundup_helper(this: Any, *args: Any) -> str:
    # same as round with the sign of the power inverted: "{{roundup 3 x}}" rounds to thousands.
    params = _params(args)
    if not params:
        raise RenderError("No arguments provided.")
    if len(params) == 1:
        raise RenderError("Only one argument provided. Requires: 'power' 'value'")
    if len(params) > 2:
        raise RenderError("roundup only takes two arguments. More were given.")

    power = _integer_param(params[0])
    value = _float_param(params[1])
    return format_number(round_value(value, -power))


def pm_helper(this: Any, *args: Any) -> str:
    """
    Render a value with its uncertainty.

    Given {"value": 1.23, "value_pm": 0.45}, "{{pm value}}" renders as
    "1.23$\\pm$0.45". With two arguments the first is the number of decimals
    to round both numbers to: "{{pm 1 value}}" renders as "1.2$\\pm$0.5".
    """
    params = _params(args)
    if not params:
        raise RenderError("No argument was given for pm")
    if len(params) > 2:
        raise RenderError("pm only takes two arguments. More were given.")

    key_param = params[-1]
    if not key_param.path:
        if key_param.value is None:
            raise RenderError("No argument was found.")
        raise RenderError(f"pm argument: {_describe(key_param.value)} is not a valid data path.")

    value_key = key_param.path[-1]
    try:
        parent = get_at_path(_root_data(this), key_param.path[:-1])
    except KeyError:
        raise RenderError(f"pm got invalid data path: {'.'.join(key_param.path)}")
    if not isinstance(parent, dict) or value_key not in parent:
        raise RenderError(f"pm got invalid data path: {'.'.join(key_param.path)}")

    value = parent[value_key]
    if not is_number(value):
        raise RenderError(f"Could not parse value {_describe(value)} as float")

    pm_key = f"{value_key}_pm"
    if pm_key not in parent:
        raise RenderError(f"{pm_key} key not found")
    pm_value = parent[pm_key]
    if not is_number(pm_value):
        raise RenderError(f"Could not parse pm value {_describe(pm_value)} as float")

    value, pm_value = as_float(value), as_float(pm_value)
    if value is None or pm_value is None:
        raise RenderError(f"pm values of {'.'.join(key_param.path)} are out of range")
    if len(params) == 2:
        decimals = _integer_param(params[0])
        value = round_value(value, decimals)
        pm_value = round_value(pm_value, decimals)

    return f"{format_number(value)}$\\pm${format_number(pm_value)}"


def sep_helper(this: Any, *args: Any) -> str:
    """
    Make large numbers readable with a 1000s separator.

    With {"separator": ",", "large_value": 123456789}, "{{sep large_value}}"
    renders "123,456,789". Numbers inside free text are grouped too; the
    "separator" key must exist at the top of the data file.
    """
    params = _params(args)
    if len(params) > 1:
        raise RenderError("sep only takes one argument. More were given.")
    if not params:
        raise RenderError("Could not read the first argument.")

    root = _root_data(this)
    if not isinstance(root, dict) or "separator" not in root:
        raise RenderError('Could not find the "separator" key in the data file. Please add it.')
    separator = display_value(root["separator"])

    value = params[0].value
    text = value if isinstance(value, str) else display_value(value)
    return separate_numbers_in_text(text, separator)


HelperFunction = Callable[..., Any]

# Dictionary of helpers registered with TemplateRenderer
BUILTIN_HELPERS: Dict[str, HelperFunction] = {
    "upper": upper_helper,
    "lower": lower_helper,
    "round": round_helper,
    "roundup": roundup_helper,
    "pm": pm_helper,
    "sep": sep_helper,
}

__all__ = [
    "BUILTIN_HELPERS",
    "Param",
    "add_separators",
    "round_value",
    "upper_helper",
    "lower_helper",
    "round_helper",
    "roundup_helper",
    "pm_helper",
    "sep_helper",
]
