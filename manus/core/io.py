# manus/core/io.py
"""
Reading documents and data files from disk or stdin.
"""
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

import structlog
import toml

from manus.exceptions import DataFormatError, InputError

log = structlog.get_logger(__name__)

STDIN_MARKER = "-"


def is_stdin(input_str: str) -> bool:
    return input_str.strip() == STDIN_MARKER


def split_lines(text: str) -> List[str]:
    # "\n" and "\r\n" terminate lines; a final terminator does not start a new line.
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def parse_filepath(filepath_str: str, expected_extension: Optional[str] = None) -> Path:
    """
    Validate a filepath, giving extension-less paths the expected extension.

    Raises InputError if the extension differs from the expected one or the
    file does not exist.
    """
    path = Path(filepath_str)
    if expected_extension:
        if path.suffix:
            if path.suffix[1:] != expected_extension:
                raise InputError(f"Incorrect extension: {path.suffix[1:]!r}. Expected: {expected_extension}")
        else:
            path = path.with_suffix(f".{expected_extension}")
    if not path.is_file():
        raise InputError(f"File not found: {path}")
    return path


def read_document(filepath: Path) -> List[str]:
    """Read a text document as a list of lines."""
    if not filepath.is_file():
        raise InputError(f"File not found: {filepath}")
    try:
        text = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read {filepath}: {e}") from e
    return split_lines(text)


def read_document_from_stdin() -> List[str]:
    log.debug("reading_document_from_stdin")
    return split_lines(sys.stdin.read())


def _parse_data_text(text: str, data_format: str, source: str) -> Any:
    try:
        if data_format == "json":
            return json.loads(text)
        if data_format == "toml":
            return toml.loads(text)
    except (json.JSONDecodeError, toml.TomlDecodeError) as e:
        raise DataFormatError(f"Could not parse {source} as {data_format.upper()}: {e}") from e
    raise DataFormatError(f"Could not read data type: {data_format}")


def read_data(filepath: Path) -> Any:
    """Read a JSON or TOML data file, chosen by its extension."""
    if not filepath.suffix:
        raise DataFormatError(f"Data file has no extension: {filepath}")
    data_format = filepath.suffix[1:].lower()
    if data_format not in ("json", "toml"):
        raise DataFormatError(f"Could not read data type: {data_format}")
    try:
        text = filepath.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(f"Could not read data file {filepath}: {e}") from e
    log.info("data_file_loaded", path=str(filepath), format=data_format)
    return _parse_data_text(text, data_format, str(filepath))


def read_data_from_stdin() -> Any:
    # only JSON is supported from pipes.
    log.debug("reading_data_from_stdin")
    return _parse_data_text(sys.stdin.read(), "json", "stdin")


def get_data_from_str(input_str: str) -> Any:
    """Read a data file from disk, or JSON from stdin if `input_str` is "-"."""
    if is_stdin(input_str):
        return read_data_from_stdin()
    return read_data(Path(input_str))

