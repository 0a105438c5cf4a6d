# manus/core/pipeline.py
import sys
from pathlib import Path
from typing import Any, List, Optional, Tuple

from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.console import Console as RichConsole
import structlog
import logging as stdlib_logging

from manus.config.settings import ManusConfig
from manus.core.assembler import merge_document
from manus.core.io import (
    get_data_from_str, is_stdin, parse_filepath, read_document_from_stdin,
)
from manus.core.templating import fill_data
from manus.core.typeset import run_engine
from manus.exceptions import InputError, OutputError

log = structlog.get_logger(__name__)

STDIN_DOCUMENT_NAME = "main.tex"
PDF_EXTENSION = "pdf"


def get_lines_and_output_path(
    input_str: str, output_path: Optional[str] = None, extension: str = "tex"
) -> Tuple[List[str], Path]:
    """
    Load the document lines, merging \\input{} files, and pick the output path.

    `-` reads the document from stdin. Without an explicit output path the
    input file name with a .pdf extension is used, in the current directory.
    """
    if is_stdin(input_str):
        lines = read_document_from_stdin()
        input_name = Path(STDIN_DOCUMENT_NAME)
    else:
        input_path = parse_filepath(input_str, extension)
        lines = merge_document(input_path, extension)
        input_name = Path(input_path.name)

    if output_path:
        resolved_output = Path(output_path)
    else:
        resolved_output = input_name.with_suffix(f".{PDF_EXTENSION}")
    return lines, resolved_output


class ManuscriptGenerator:
    # orchestrates merging, data filling and typesetting of one document.
    def __init__(self, config: ManusConfig):
        self.config: ManusConfig = config
        self.log = structlog.get_logger(f"{__name__}.{self.__class__.__name__}")
        self.lines: List[str] = []
        self.output_path: Optional[Path] = None
        self.data: Any = None

    def _check_sources(self) -> None:
        if self.config.data_path and is_stdin(self.config.input_path) and is_stdin(self.config.data_path):
            raise InputError("Input tex and data cannot both be from stdin.")

    def load(self) -> List[str]:
        # reads and merges the document, then loads the data file if one is configured.
        self._check_sources()
        self.lines, self.output_path = get_lines_and_output_path(
            self.config.input_path, self.config.output_path, self.config.extension
        )
        self.log.info("document_loaded", input=self.config.input_path, lines=len(self.lines))
        if self.config.data_path:
            self.data = get_data_from_str(self.config.data_path)
        return self.lines

    def generate(self) -> str:
        """Return the merged document, with data filled in when a data file is configured."""
        lines = self.load()
        if self.data is not None:
            lines = fill_data(lines, self.data, strict=self.config.strict)
            self.log.info("data_filled", lines=len(lines))
        return "\n".join(lines)

    def build(self) -> Path:
        """Render the document and typeset it into a PDF."""
        tex_string = self.generate()
        output_path = self.output_path
        parent = output_path.parent
        if str(parent) and not parent.is_dir():
            raise OutputError(f"Parent directory '{parent}' does not exist")

        app_log_level = stdlib_logging.getLogger("manus").getEffectiveLevel()
        progress_disabled = app_log_level > stdlib_logging.INFO or not sys.stderr.isatty() or self.config.verbose
        stderr_console = RichConsole(file=sys.stderr)

        with Progress(
            SpinnerColumn(), TextColumn("[bold blue]{task.description}"),
            transient=True, disable=progress_disabled, console=stderr_console
        ) as progress:
            task = progress.add_task(f"typesetting with {self.config.engine}...", total=None)
            run_engine(
                tex_string,
                output_path,
                engine=self.config.engine,
                verbose=self.config.verbose,
                keep_intermediates=self.config.keep_intermediates,
                synctex=self.config.synctex,
            )
            progress.update(task, completed=True, description=f"wrote {output_path.name}")

        return output_path
