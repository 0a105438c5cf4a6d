# manus/core/templating/__init__.py
"""
Templating module for manus.

Provides the TemplateRenderer for filling placeholders line by line, and
fill_data, which resolves the data context and renders a whole document.
"""
from .renderer import TemplateRenderer, fill_data
from .helpers import BUILTIN_HELPERS, add_separators, round_value

__all__ = [
    "TemplateRenderer",
    "fill_data",
    "BUILTIN_HELPERS",
    "add_separators",
    "round_value",
]
