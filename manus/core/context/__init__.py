# manus/core/context/__init__.py
"""
Data context handling for manus.

Locates "expr:" values in a parsed data file, evaluates them in dependency
order and returns a fully computed copy of the context for rendering.
"""
from .evaluator import evaluate_expression, run_eval, MAX_RECURSION_DEPTH
from .locator import find_expressions
from .resolver import evaluate_all_expressions

__all__ = [
    "evaluate_all_expressions",
    "evaluate_expression",
    "find_expressions",
    "run_eval",
    "MAX_RECURSION_DEPTH",
]
