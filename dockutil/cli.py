#!/usr/bin/env python3
"""dockutil CLI - narrow container-runtime helper for orchestration scripts."""
from typing import Optional

import typer
from rich.console import Console

from dockutil import __version__
from dockutil.cli_container_commands import register_container_commands
from dockutil.cli_image_commands import register_image_commands
from dockutil.core.config import get_config
from dockutil.core.logger import set_verbose, setup_file_logging

app = typer.Typer(
    name="dockutil",
    help="""dockutil - container runtime helper for orchestration scripts

Each command talks to the docker daemon once and prints a bare result.

Examples:
  dockutil container-state web 'nginx:1\\.2'
  dockutil run-container -v /data:/data --name web nginx nginx -g 'daemon off;'
  dockutil ask-version myorg/agent
""",
    add_completion=False,
    no_args_is_help=True,
)

# Errors and diagnostics go to stderr; stdout carries results only
console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"dockutil version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", help="Show debug output on stderr."),
    log_file: Optional[str] = typer.Option(
        None, "--log-file", help="Also write a log file (default: DOCKUTIL_LOG_FILE)."
    ),
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """dockutil - container runtime helper for orchestration scripts."""
    set_verbose(verbose)
    log_file = log_file or get_config().log_file
    if log_file:
        setup_file_logging(log_file=log_file, verbose=verbose)


register_container_commands(app, console)
register_image_commands(app, console)


def cli() -> None:
    """Console script entry point."""
    app(prog_name="dockutil")


if __name__ == "__main__":
    cli()
