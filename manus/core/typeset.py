# manus/core/typeset.py
"""Runs an external TeX engine to turn rendered text into a PDF.

The text is written to a temporary directory as `texput.tex`, the engine is
run there, and the resulting PDF (plus intermediates on request) is copied
next to the requested output path, renamed after it.
"""

import subprocess
import tempfile
from pathlib import Path
from typing import List

import click
import structlog

from manus.core.output import write_bytes_to_file
from manus.exceptions import EngineError

log = structlog.get_logger(__name__)

DEFAULT_ENGINE = "tectonic"
TEX_INPUT_NAME = "texput.tex"
PDF_OUTPUT_NAME = "texput.pdf"
SYNCTEX_NAME = "texput.synctex.gz"
SYNCTEX_EXTENSION = "synctex.gz"


def build_engine_command(
    engine: str, tex_path: Path, outdir: Path, keep_intermediates: bool, synctex: bool
) -> List[str]:
    """Build the engine command line.

    Args:
        engine: Engine executable (tectonic-compatible flags are used)
        tex_path: The TeX file to compile
        outdir: Directory the engine writes its outputs to
        keep_intermediates: Keep .aux/.log and friends
        synctex: Generate synctex data

    Returns:
        The argument list for subprocess.run
    """
    command = [engine, "--outdir", str(outdir)]
    if keep_intermediates:
        command += ["--keep-intermediates", "--keep-logs"]
    if synctex:
        command.append("--synctex")
    command.append(str(tex_path))
    return command


def _intermediate_extension(produced: Path) -> str:
    if produced.name == SYNCTEX_NAME:
        return SYNCTEX_EXTENSION
    return produced.suffix[1:]


def run_engine(
    tex_string: str,
    output_path: Path,
    engine: str = DEFAULT_ENGINE,
    verbose: bool = False,
    keep_intermediates: bool = False,
    synctex: bool = False,
) -> Path:
    """Compile `tex_string` into a PDF at `output_path`.

    Raises:
        EngineError: If the engine is missing, fails, or produces no PDF
    """
    with tempfile.TemporaryDirectory(prefix="manus_") as tmp:
        workdir = Path(tmp)
        tex_path = workdir / TEX_INPUT_NAME
        tex_path.write_text(tex_string, encoding="utf-8")

        command = build_engine_command(engine, tex_path, workdir, keep_intermediates, synctex)
        log.info("running_typesetting_engine", command=command)

        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
                cwd=workdir,
            )
        except FileNotFoundError:
            raise EngineError(f"{engine} command not found - please install it")
        except OSError as e:
            raise EngineError(f"failed to run {engine}: {e}")

        if verbose:
            if result.stdout:
                click.echo(result.stdout, err=True)
            if result.stderr:
                click.echo(result.stderr, err=True)

        if result.returncode != 0:
            log.debug("typesetting_engine_output", stdout=result.stdout, stderr=result.stderr)
            log.error("typesetting_engine_failed", engine=engine, returncode=result.returncode)
            raise EngineError(f"{engine} exited with an error (code {result.returncode})")

        pdf_path = workdir / PDF_OUTPUT_NAME
        if not pdf_path.is_file():
            raise EngineError("LaTeX didn't report failure, but no PDF was created (??)")
        write_bytes_to_file(output_path, pdf_path.read_bytes())

        if keep_intermediates or synctex:
            for produced in sorted(workdir.iterdir()):
                if produced.name in (TEX_INPUT_NAME, PDF_OUTPUT_NAME) or not produced.is_file():
                    continue
                extension = _intermediate_extension(produced)
                if not extension:
                    continue
                if not keep_intermediates and extension != SYNCTEX_EXTENSION:
                    continue
                target = output_path.with_name(f"{output_path.stem}.{extension}")
                write_bytes_to_file(target, produced.read_bytes())

    log.info("pdf_written", path=str(output_path))
    return output_path
