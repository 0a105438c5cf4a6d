# manus/core/context/locator.py
from typing import Any, List, Optional, Tuple

from .values import KeyPath, is_expression

LocatedExpression = Tuple[KeyPath, str]


def find_expressions(data: Any, parent: Optional[KeyPath] = None) -> List[LocatedExpression]:
    """
    Recursively finds every "expr:" string in the context.

    Map keys extend the path; list items keep the path of the list. Results
    come back in declaration order as (key path, full expression text).
    """
    relative_parent: KeyPath = list(parent) if parent else []
    output: List[LocatedExpression] = []

    if isinstance(data, list):
        for item in data:
            output.extend(find_expressions(item, relative_parent))
    elif isinstance(data, dict):
        for key, value in data.items():
            output.extend(find_expressions(value, relative_parent + [str(key)]))
    elif is_expression(data):
        output.append((relative_parent, data))

    return output
