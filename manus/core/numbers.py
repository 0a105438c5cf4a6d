# manus/core/numbers.py
"""
Numeric formatting shared by the expression evaluator and the template helpers.
"""
import math
from decimal import Decimal
from typing import Any, Optional


def format_number(value: Any) -> str:
    """Default decimal text for a number: no trailing '.0', never scientific notation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if not math.isfinite(value):
        return repr(value)
    if value.is_integer():
        return str(int(value))
    text = repr(value)
    if "e" in text or "E" in text:
        text = format(Decimal(text), "f")
    return text


def _round_half_away_from_zero(value: float) -> float:
    if not math.isfinite(value):
        return value
    magnitude = abs(value)
    floor_part = math.floor(magnitude)
    if magnitude - floor_part >= 0.5:
        floor_part += 1
    return math.copysign(floor_part, value)


def round_value(value: float, decimals: int) -> float:
    """
    Round a value to the nearest decimal, ties away from zero.

    decimals > 0 rounds to that many decimals, 0 to the nearest integer and
    decimals < 0 to the nearest power of ten (-3 rounds to thousands).
    Non-finite values are returned unchanged.

    >>> round_value(1.234, 1)
    1.2
    >>> round_value(8699.0, -3)
    9000.0
    """
    if not math.isfinite(value):
        return value
    try:
        factor = 10.0 ** abs(decimals)
    except OverflowError:
        # past float range a value has no digits left to round, or rounds to zero.
        return value if decimals > 0 else math.copysign(0.0, value)

    if decimals >= 0:
        scaled = value * factor
        if not math.isfinite(scaled):
            return value
        return _round_half_away_from_zero(scaled) / factor
    return _round_half_away_from_zero(value / factor) * factor


def group_digits(number_text: str, separator: str) -> str:
    """Insert `separator` every three digits of the integer part of a numeric string."""
    integer_part, dot, fraction = number_text.partition(".")
    sign = ""
    if integer_part[:1] in ("-", "+"):
        sign, integer_part = integer_part[0], integer_part[1:]
    groups = []
    while len(integer_part) > 3:
        groups.insert(0, integer_part[-3:])
        integer_part = integer_part[:-3]
    groups.insert(0, integer_part)
    return sign + separator.join(groups) + dot + fraction


def add_separators(number: float, separator: str) -> str:
    """
    Add 1000s separators to a number.

    >>> add_separators(12345.678, ",")
    '12,345.678'
    """
    return group_digits(format_number(number), separator)


def separate_numbers_in_text(text: str, separator: str) -> str:
    """
    Group the digits of every number found in free text.

    A number is a run of digits that may carry single periods; everything
    else in the text is copied through untouched.
    """
    output = []
    number_buffer = []
    in_digit = False
    n_periods = 0
    for char in text:
        n_periods = n_periods + 1 if char == "." else 0
        in_digit = char.isascii() and char.isdigit() or (in_digit and n_periods == 1)
        if in_digit:
            number_buffer.append(char)
            continue
        if number_buffer:
            output.append(group_digits("".join(number_buffer), separator))
            number_buffer = []
        output.append(char)
    if number_buffer:
        output.append(group_digits("".join(number_buffer), separator))
    return "".join(output)


def as_integer(value: Any) -> Optional[int]:
    # integers and integer strings; floats are rejected even when integral.
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def as_float(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float, str)):
        try:
            return float(value.strip() if isinstance(value, str) else value)
        except (ValueError, OverflowError):
            return None
    return None
