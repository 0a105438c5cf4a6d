# manus/core/assembler.py
"""
Flattens a TeX document by recursively expanding its \\input{...} directives.
"""
from pathlib import Path
from typing import List, Optional, Tuple

import structlog

from manus.core.io import read_document
from manus.exceptions import InputError, MergeError

log = structlog.get_logger(__name__)

INPUT_DIRECTIVE = "\\input{"
DEFAULT_EXTENSION = "tex"


def _extract_input_path(line: str, line_number: int, filepath: Path) -> str:
    start = line.find(INPUT_DIRECTIVE) + len(INPUT_DIRECTIVE)
    end = line.find("}", start)
    if end == -1:
        raise MergeError(f"Unclosed delimiter at line {line_number} of {filepath}")
    path_str = line[start:end]
    if Path(path_str.strip()).name in ("", ".", ".."):
        raise MergeError(f"No file name given to \\input at line {line_number} of {filepath}")
    return path_str


def resolve_input_path(path_str: str, including_file: Path, extension: str = DEFAULT_EXTENSION) -> Path:
    """
    Resolve the argument of an \\input directive.

    Extension-less paths get the document extension. The path is tried as
    given first, then relative to the directory of the including file.
    """
    input_path = Path(path_str.strip())
    if not input_path.suffix:
        input_path = input_path.with_suffix(f".{extension}")
    if not input_path.is_file():
        input_path = including_file.parent / input_path
    return input_path


def merge_document(filepath: Path, extension: str = DEFAULT_EXTENSION,
                   _stack: Optional[Tuple[Path, ...]] = None) -> List[str]:
    """
    Read a document and recursively merge all \\input{} statements.

    Lines of included files replace the directive line, in order. A file that
    includes itself, directly or through other files, raises MergeError.
    """
    stack = _stack or ()
    key = filepath.resolve()
    if key in stack:
        chain = " -> ".join(str(p) for p in stack + (key,))
        raise MergeError(f"Circular \\input detected: {chain}")

    try:
        main_lines = read_document(filepath)
    except InputError as e:
        raise MergeError(str(e)) from e
    log.debug("merging_document", path=str(filepath), depth=len(stack), lines=len(main_lines))

    lines: List[str] = []
    for line_number, line in enumerate(main_lines, start=1):
        if INPUT_DIRECTIVE not in line:
            lines.append(line)
            continue

        input_path = resolve_input_path(_extract_input_path(line, line_number, filepath), filepath, extension)
        log.debug("expanding_input_directive", source=str(filepath), line=line_number, target=str(input_path))
        lines.extend(merge_document(input_path, extension, stack + (key,)))

    return lines
