# manus/cli/interface.py
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import click
from click_option_group import optgroup
import structlog

from manus import __version__ as app_version
from manus.config.settings import ManusConfig, OutputFormat, DEFAULT_ENGINE, DEFAULT_OUTPUT_FORMAT
from manus.config.loader import load_and_merge_configs, default_options, apply_config_values
from manus.logging_setup import configure_logging
from manus.core.output import write_to_stdout, write_to_file
from manus.core.pipeline import ManuscriptGenerator
from manus.exceptions import ManusError, EngineError

log = structlog.get_logger(__name__)

MAX_VERBOSITY = 2
VERBOSE_HINT = "Run the command with --verbose to find out what went wrong."


@dataclass
class CliState:
    # options shared by all subcommands.
    verbosity: int = 0
    profile: Optional[str] = None


def _effective_config(ctx: click.Context, cli_params: Dict[str, Any]) -> ManusConfig:
    # dataclass defaults < config files < profile < command line.
    state: CliState = ctx.obj or CliState()
    options = default_options()
    apply_config_values(options, load_and_merge_configs(), state.profile)

    for name, value in cli_params.items():
        if ctx.get_parameter_source(name) != click.core.ParameterSource.COMMANDLINE:
            continue
        if name == "output_format_str":
            options["output_format"] = OutputFormat.from_string(value)
        else:
            options[name] = value

    options["verbose"] = state.verbosity > 0
    log.debug("effective_config_built", options={k: str(v) for k, v in options.items()})
    return ManusConfig(**options)


def _run_handled(action: Callable[[], None]) -> None:
    try:
        action()
    except click.exceptions.Exit as e: raise e
    except ManusError as e:
        log.error("handled_application_error_in_cli", error_type=type(e).__name__, message=str(e))
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)
    except click.ClickException as e:
        log.error("click_exception_in_cli", error_type=type(e).__name__, message=str(e))
        e.show(); sys.exit(e.exit_code)
    except Exception as e:
        log.critical("unexpected_critical_error_in_cli", message=str(e), exc_info=True)
        click.secho(f"Unexpected critical error: {e}. Please report this.", fg="red", err=True)
        sys.exit(1)


@click.group(context_settings=dict(help_option_names=["-h", "--help"]), invoke_without_command=True)
@optgroup.group("Application Behavior", help="Configuration profiles and logging.")
@optgroup.option("--config-profile", "active_config_profile_name", default=None, help="Load a profile from config file(s).")
@optgroup.option("--verbose", "-v", "verbosity_level", count=True, help="Verbosity: -v info (and engine output), -vv debug.")
@optgroup.option("--force-json-logs", "force_json_logs_cli", is_flag=True, default=False, help="Force JSON logs.")
@click.version_option(version=app_version, package_name="manus", prog_name="manus", help="Show version and exit.")
@click.pass_context
def main_cli_group(ctx: click.Context, active_config_profile_name: Optional[str],
                   verbosity_level: int, force_json_logs_cli: bool):
    """manus: merge TeX manuscripts, fill them with data and typeset them."""
    if verbosity_level > MAX_VERBOSITY:
        click.secho(f"Error: Invalid verbosity level: {verbosity_level}. Max: {MAX_VERBOSITY}", fg="red", err=True)
        sys.exit(1)

    log_level = "warning"
    if verbosity_level == 1: log_level = "info"
    elif verbosity_level >= 2: log_level = "debug"
    configure_logging(log_level_str=log_level, force_json_logs=force_json_logs_cli)

    ctx.obj = CliState(verbosity=verbosity_level, profile=active_config_profile_name)
    log.debug("cli_command_invoked", subcommand=ctx.invoked_subcommand, profile=active_config_profile_name)

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main_cli_group.command("build")
@click.argument("input_path", metavar="INPUT")
@click.argument("output_path", metavar="[OUTPUT]", required=False, default=None)
@optgroup.group("Data Options", help="Fill placeholders from a data file.")
@optgroup.option("-d", "--data", "data_path", default=None, help="JSON or TOML data file ('-' reads JSON from stdin).")
@optgroup.option("--strict/--no-strict", "strict", default=True, help="Treat missing variables as errors (the line is kept and a warning printed).")
@optgroup.group("Engine Options", help="Control the typesetting engine.")
@optgroup.option("--engine", "engine", default=DEFAULT_ENGINE, help=f"Typesetting engine executable. Default: {DEFAULT_ENGINE}.")
@optgroup.option("-k", "--keep-intermediates", "keep_intermediates", is_flag=True, default=False, help="Keep intermediate files (.aux, .log, ...) next to the PDF.")
@optgroup.option("-s", "--synctex", "synctex", is_flag=True, default=False, help="Generate synctex data for the PDF.")
@click.pass_context
def build_command(ctx: click.Context, **cli_params: Any):
    """Build a PDF from INPUT ('-' reads from stdin)."""
    def action():
        config = _effective_config(ctx, cli_params)
        generator = ManuscriptGenerator(config)
        try:
            pdf_path = generator.build()
        except EngineError as e:
            if config.verbose:
                raise
            raise EngineError(f"{e}. {VERBOSE_HINT}") from e
        click.echo(f"Info: PDF written to: {pdf_path}", err=True)

    _run_handled(action)


@main_cli_group.command("convert")
@click.argument("input_path", metavar="INPUT")
@optgroup.group("Data Options", help="Fill placeholders from a data file.")
@optgroup.option("-d", "--data", "data_path", default=None, help="JSON or TOML data file ('-' reads JSON from stdin).")
@optgroup.option("--strict/--no-strict", "strict", default=True, help="Treat missing variables as errors (the line is kept and a warning printed).")
@optgroup.group("Output Options", help="Where and how to write the result.")
@optgroup.option("-f", "--format", "output_format_str", type=click.Choice([f.value for f in OutputFormat]), default=DEFAULT_OUTPUT_FORMAT.value, help=f"Output format. Default: {DEFAULT_OUTPUT_FORMAT.value}.")
@optgroup.option("-o", "--output", "output_file", type=click.Path(dir_okay=False, writable=True, path_type=Path), default=None, help="Path to write the output to.")
@click.pass_context
def convert_command(ctx: click.Context, **cli_params: Any):
    """Write INPUT, merged and filled with data, as TeX."""
    def action():
        config = _effective_config(ctx, cli_params)
        output_text = ManuscriptGenerator(config).generate() + "\n"
        if config.output_file:
            write_to_file(config.output_file, output_text)
            click.echo(f"Info: Output written to: {config.output_file}", err=True)
        else:
            log.info("writing_final_output_to_stdout")
            write_to_stdout(output_text)

    _run_handled(action)


@main_cli_group.command("merge")
@click.argument("input_path", metavar="INPUT")
@click.pass_context
def merge_command(ctx: click.Context, **cli_params: Any):
    """Print INPUT with all \\input{} files merged in."""
    def action():
        config = _effective_config(ctx, cli_params)
        config.data_path = None
        lines = ManuscriptGenerator(config).load()
        write_to_stdout("\n".join(lines) + "\n")

    _run_handled(action)
