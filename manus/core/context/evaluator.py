# manus/core/context/evaluator.py
"""
Evaluates "expr:" formulas against the data context.

Formulas are parsed with the `ast` module and walked by a small interpreter
that only knows numbers, arithmetic operators, parentheses, context lookups
and the `round` function. Lookups that land on another expression evaluate it
first, so formulas may build on each other in any declaration order.
"""
import ast
import math
import operator
from typing import Any, Callable, Dict, FrozenSet, List, Optional, Tuple

import structlog

from manus.core.numbers import round_value
from manus.exceptions import ExpressionError, ExpressionRecursionError

from .values import EXPRESSION_MARKER, KeyPath, is_expression, is_number, join_path, normalize_number

log = structlog.get_logger(__name__)

MAX_RECURSION_DEPTH = 1000
MISSPELLED_HINT = ". Perhaps a key is misspelled?"

_BINARY_OPERATORS: Dict[type, Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
    ast.Pow: math.pow,
}

_UNARY_OPERATORS: Dict[type, Callable[[Any], Any]] = {
    ast.UAdd: operator.pos,
    ast.USub: operator.neg,
}


class _NullReference(Exception):
    # a reference that resolved to nothing; reported with the misspelling hint.
    pass


def _collect_named(node: Any, name: str, path: KeyPath, matches: List[Tuple[KeyPath, Any]]) -> None:
    if isinstance(node, dict):
        for key, value in node.items():
            if key == name:
                matches.append((path + [key], value))
            _collect_named(value, name, path + [key], matches)
    elif isinstance(node, list):
        for item in node:
            _collect_named(item, name, path, matches)


def lookup_name(name: str, data: Any) -> Tuple[KeyPath, Any]:
    """
    Resolve a bare identifier: a top-level key wins, otherwise the single key
    with that name anywhere in nested maps.
    """
    if isinstance(data, dict) and name in data:
        return [name], data[name]

    matches: List[Tuple[KeyPath, Any]] = []
    _collect_named(data, name, [], matches)
    if not matches:
        raise _NullReference(f"Variable '{name}' not found (Null)")

    first_path, first_value = matches[0]
    if any(value != first_value for _, value in matches[1:]):
        candidates = ", ".join(join_path(path) for path, _ in matches)
        raise ExpressionError(f"Variable '{name}' is ambiguous ({candidates}). Use a qualified dotted path.")
    return first_path, first_value


class _FormulaInterpreter:
    def __init__(self, formula: str, data: Any, depth: int, visiting: FrozenSet[str]):
        self.formula = formula
        self.data = data
        self.depth = depth
        self.visiting = visiting

    def evaluate(self, tree: ast.Expression) -> Any:
        return self.visit(tree.body)

    def visit(self, node: ast.AST) -> Any:
        if isinstance(node, ast.Constant):
            if is_number(node.value):
                return node.value
            raise ExpressionError(f"Unsupported literal: {node.value!r}")
        if isinstance(node, (ast.Name, ast.Attribute, ast.Subscript)):
            path, raw_value = self.resolve_reference(node)
            return self.operand(path, raw_value)
        if isinstance(node, ast.BinOp):
            op_func = _BINARY_OPERATORS.get(type(node.op))
            if op_func is None:
                raise ExpressionError(f"Unsupported operator: {type(node.op).__name__}")
            left = self.require_number(self.visit(node.left))
            right = self.require_number(self.visit(node.right))
            try:
                return op_func(left, right)
            except ZeroDivisionError:
                raise ExpressionError("Division by zero")
            except (OverflowError, ValueError) as e:
                raise ExpressionError(f"Arithmetic error: {e}")
        if isinstance(node, ast.UnaryOp):
            op_func = _UNARY_OPERATORS.get(type(node.op))
            if op_func is None:
                raise ExpressionError(f"Unsupported operator: {type(node.op).__name__}")
            return op_func(self.require_number(self.visit(node.operand)))
        if isinstance(node, ast.Call):
            return self.call(node)
        raise ExpressionError(f"Unsupported syntax: {type(node).__name__}")

    def call(self, node: ast.Call) -> Any:
        if not isinstance(node.func, ast.Name) or node.func.id != "round":
            raise ExpressionError(f"Unknown function: {ast.unparse(node.func)}")
        if node.keywords or not 1 <= len(node.args) <= 2:
            raise ExpressionError("round takes one or two positional arguments: round(value, decimals)")

        value = self.require_number(self.visit(node.args[0]))
        decimals = self.require_number(self.visit(node.args[1])) if len(node.args) == 2 else 0
        try:
            if not float(decimals).is_integer():
                raise ExpressionError(f"Second rounding argument must be an integer. Given value: {decimals}")
            return normalize_number(round_value(float(value), int(decimals)))
        except (OverflowError, ValueError) as e:
            raise ExpressionError(f"Arithmetic error: {e}")

    def resolve_reference(self, node: ast.AST) -> Tuple[KeyPath, Any]:
        if isinstance(node, ast.Name):
            return lookup_name(node.id, self.data)
        if isinstance(node, ast.Attribute):
            path, parent = self.resolve_reference(node.value)
            if not isinstance(parent, dict) or node.attr not in parent:
                raise _NullReference(f"Variable '{join_path(path + [node.attr])}' not found (Null)")
            return path + [node.attr], parent[node.attr]
        if isinstance(node, ast.Subscript):
            path, parent = self.resolve_reference(node.value)
            index = node.slice
            if not (isinstance(index, ast.Constant) and isinstance(index.value, int) and not isinstance(index.value, bool)):
                raise ExpressionError("Only integer subscripts are supported")
            if not isinstance(parent, list) or not -len(parent) <= index.value < len(parent):
                raise _NullReference(f"Index {index.value} of '{join_path(path)}' not found (Null)")
            return path + [str(index.value)], parent[index.value]
        raise ExpressionError(f"Unsupported reference: {type(node).__name__}")

    def operand(self, path: KeyPath, raw_value: Any) -> Any:
        if is_expression(raw_value):
            dotted = join_path(path)
            if dotted in self.visiting:
                raise ExpressionRecursionError(
                    f"Circular reference to '{dotted}' in expression: '{self.formula}'. "
                    "Maybe due to a circular expression? (infinite recursion)"
                )
            log.debug("evaluating_referenced_expression", path=dotted, depth=self.depth + 1)
            return evaluate_expression(raw_value, self.data, self.depth + 1, self.visiting | {dotted})
        if isinstance(raw_value, str):
            try:
                number = float(raw_value.strip())
            except ValueError:
                raise ExpressionError(f"Could not parse '{raw_value}' at '{join_path(path)}' as a number")
            return normalize_number(number)
        if isinstance(raw_value, (dict, list)):
            raise ExpressionError(f"'{join_path(path)}' is not a number")
        if isinstance(raw_value, bool):
            raise ExpressionError(f"'{join_path(path)}' is a boolean, not a number")
        return raw_value

    @staticmethod
    def require_number(value: Any) -> Any:
        if value is None:
            raise _NullReference("Expected a number, found Null")
        return value


def run_eval(expr_string: str, data: Any, recursion_depth: int = 0, visiting: Optional[FrozenSet[str]] = None) -> Any:
    """Evaluate a bare formula (no marker) against `data` and return its number."""
    try:
        tree = ast.parse(expr_string.strip(), mode="eval")
    except SyntaxError as e:
        raise ExpressionError(f"Error in expression: '{expr_string}': invalid syntax ({e.msg})")

    interpreter = _FormulaInterpreter(expr_string, data, recursion_depth, visiting or frozenset())
    try:
        result = interpreter.evaluate(tree)
    except _NullReference as e:
        raise ExpressionError(f"Error in expression: '{expr_string}': {e}{MISSPELLED_HINT}")
    except ExpressionRecursionError:
        raise
    except RecursionError:
        raise ExpressionRecursionError(
            f"Max recursion depth reached for expression: '{expr_string}'. Maybe due to a circular expression?"
        )
    except ExpressionError as e:
        message = str(e)
        if message.startswith("Error in expression:") or message.startswith("Expression '"):
            raise
        raise ExpressionError(f"Error in expression: '{expr_string}': {message}")

    if result is None:
        raise ExpressionError(f"Expression '{expr_string}' returned no value")
    return result


def evaluate_expression(expression: str, data: Any, recursion_depth: int = 0,
                        visiting: Optional[FrozenSet[str]] = None) -> Any:
    """
    Evaluate an "expr:" value, evaluating the expressions it refers to first.

    `visiting` holds the dotted paths of the expressions currently being
    evaluated; meeting one of them again means the formulas are circular.
    """
    if recursion_depth > MAX_RECURSION_DEPTH:
        raise ExpressionRecursionError(
            f"Max recursion depth reached for expression: '{expression}'. Maybe due to a circular expression?"
        )
    expr_string = expression.replace(EXPRESSION_MARKER, "", 1).strip()
    return run_eval(expr_string, data, recursion_depth, visiting)
