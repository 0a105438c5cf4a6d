# manus/main.py
"""Main entry point for the manus CLI application."""

from manus.cli.interface import main_cli_group


def entrypoint():
    """Function to be called by the script defined in pyproject.toml."""
    main_cli_group(prog_name="manus")

if __name__ == '__main__':
    entrypoint()
