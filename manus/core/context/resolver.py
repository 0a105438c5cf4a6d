# manus/core/context/resolver.py
from typing import Any

import structlog

from manus.exceptions import ContextWriteError, ExpressionError, ExpressionRecursionError

from .evaluator import evaluate_expression
from .locator import find_expressions
from .values import clone, join_path, normalize_number, set_at_path

log = structlog.get_logger(__name__)


def evaluate_all_expressions(data: Any) -> Any:
    """
    Return a copy of the data context with every "expr:" value replaced by its result.

    Expressions are evaluated in declaration order against the copy, so each
    result is visible to the ones evaluated after it. The input is never
    modified. Any failure aborts the whole resolution.
    """
    new_data = clone(data)
    expressions = find_expressions(data)
    log.info("resolving_context_expressions", count=len(expressions))

    for keys, expr_string in expressions:
        dotted = join_path(keys)
        try:
            new_value = evaluate_expression(expr_string, new_data, 0, frozenset({dotted}))
        except ExpressionRecursionError as e:
            raise ExpressionRecursionError(f"Error for expression in '{dotted}' ('{expr_string}'): {e}") from e
        except ExpressionError as e:
            raise ExpressionError(f"Error for expression in '{dotted}' ('{expr_string}'): {e}") from e

        new_value = normalize_number(new_value)
        try:
            set_at_path(new_data, keys, new_value, original=expr_string)
        except ContextWriteError as e:
            raise ContextWriteError(f"Error setting key '{dotted}': {e}") from e
        log.debug("expression_resolved", path=dotted, value=new_value)

    return new_data
