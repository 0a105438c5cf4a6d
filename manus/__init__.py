# manus/__init__.py
"""manus: a manuscript helper that merges TeX sources and fills them with data."""

__version__ = "0.1.0"
