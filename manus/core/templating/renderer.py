# manus/core/templating/renderer.py
"""
Contains the TemplateRenderer class responsible for compiling and rendering
the Handlebars placeholders of a document, line by line, from a resolved
data context.
"""
import re
from typing import Any, Callable, Dict, List, Optional

import click
import pybars  # type: ignore
import structlog

from manus.core.context import evaluate_all_expressions
from manus.core.context.values import display_value
from manus.exceptions import RenderError

from .helpers import BUILTIN_HELPERS, HelperFunction
from .scope import STRICT_MODE_SUFFIX, unwrap, wrap

log = structlog.get_logger(__name__)

PLACEHOLDER_START = "{{"
_COMPILE_ERROR_POSITION = re.compile(r"Error at character (\d+)")


def locate_placeholder(line: str, subject: Optional[str] = None) -> int:
    """1-based column of the placeholder mentioning `subject`, else of the first one; 0 if none."""
    if subject:
        match = re.search(r"\{\{[^}]*?(?<![\w.@/-])" + re.escape(subject) + r"(?![\w.@/-])", line)
        if match:
            return match.start() + 1
    index = line.find(PLACEHOLDER_START)
    return index + 1 if index >= 0 else 0


def _unescaped(name: str, helper: HelperFunction) -> Callable[..., Any]:
    # pybars HTML-escapes plain strings; a strlist result is emitted as is.
    def call_helper(this: Any, *args: Any, **kwargs: Any) -> pybars.strlist:
        try:
            result = helper(this, *args, **kwargs)
        except RenderError as e:
            if e.subject is None:
                e.subject = name
            raise
        return pybars.strlist([display_value(unwrap(result))])

    return call_helper


def _helper_missing(this: Any, name: str, *args: Any) -> None:
    # pybars calls this for an unknown name; without arguments it is an absent value.
    if args:
        raise RenderError(f'Helper not defined: "{name}"', subject=name)
    return None


class TemplateRenderer:
    """Renders lines of text against a data context with pybars and the registered helpers."""

    def __init__(self, helpers: Optional[Dict[str, HelperFunction]] = None, strict: bool = True):
        self.strict = strict
        self.handlebars_compiler = pybars.Compiler()
        self.registered_helpers: Dict[str, Callable[..., Any]] = {
            name: _unescaped(name, helper)
            for name, helper in {**BUILTIN_HELPERS, **(helpers or {})}.items()
        }
        self.registered_helpers["helperMissing"] = _helper_missing
        self._compiled_lines: Dict[str, Callable[..., Any]] = {}

    def _compile(self, line: str) -> Callable[..., Any]:
        compiled = self._compiled_lines.get(line)
        if compiled is None:
            try:
                compiled = self.handlebars_compiler.compile(line)
            except pybars.PybarsError as e:
                match = _COMPILE_ERROR_POSITION.search(str(e))
                column = int(match.group(1)) + 1 if match else locate_placeholder(line)
                raise RenderError(f"Invalid placeholder: {e}", column=column) from e
            self._compiled_lines[line] = compiled
        return compiled

    def render_line(self, line: str, context: Any) -> str:
        """Render one line. Raises RenderError (with a column) on the first failing placeholder."""
        if PLACEHOLDER_START not in line:
            return line
        compiled = self._compile(line)
        try:
            return str(compiled(wrap(context, strict=self.strict), helpers=self.registered_helpers))
        except RenderError as e:
            if e.column is None:
                e.column = locate_placeholder(line, e.subject)
            raise
        except Exception as e:
            log.debug("placeholder_evaluation_failed", error=str(e), exc_info=True)
            raise RenderError(str(e), column=locate_placeholder(line)) from e

    def render_lines(self, lines: List[str], context: Any) -> List[str]:
        """
        Render every line independently.

        A line that fails is kept as it was and a "WARNING L<line>C<column>"
        message is written to stderr; the other lines are unaffected.
        """
        new_lines: List[str] = []
        failed_count = 0
        for i, line in enumerate(lines):
            try:
                new_lines.append(self.render_line(line, context))
            except RenderError as e:
                failed_count += 1
                column = e.column or 0
                description = str(e).replace(STRICT_MODE_SUFFIX, "")
                log.debug("line_render_failed", line=i + 1, column=column, error=description)
                click.echo(f"WARNING L{i + 1}C{column}: {description}", err=True)
                new_lines.append(line)
        log.info("lines_rendered", total=len(lines), failed=failed_count)
        return new_lines


def fill_data(lines: List[str], data: Any, strict: bool = True) -> List[str]:
    """
    Fill a list of lines with data using templating.

    "expr:" values are resolved first; errors there abort before any line is
    rendered. Per-line render errors only produce warnings.
    """
    parsed_data = evaluate_all_expressions(data)
    renderer = TemplateRenderer(strict=strict)
    return renderer.render_lines(lines, parsed_data)
