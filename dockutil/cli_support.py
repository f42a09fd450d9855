"""Shared utilities for dockutil CLI modules."""
from __future__ import annotations

from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.markup import escape

from dockutil.core.config import DockutilConfig, get_config
from dockutil.core.errors import UsageError
from dockutil.core.logger import get_logger
from dockutil.services.docker import ContainerLifecycle, RuntimeClient

logger = get_logger(__name__)


def get_runtime_client(config: Optional[DockutilConfig] = None) -> RuntimeClient:
    """Return a daemon client; the connection is made on first use."""
    return RuntimeClient(config=config or get_config())


def get_lifecycle(client=None) -> ContainerLifecycle:
    """Return lifecycle workflows bound to ``client`` (or a fresh runtime client)."""
    return ContainerLifecycle(client or get_runtime_client(), config=get_config())


def emit(value, newline: bool = False) -> None:
    """Write a command result to stdout.

    Single values are printed without a trailing newline so that shell
    command substitution sees the bare value.
    """
    typer.echo(value, nl=newline)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1,
) -> NoReturn:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output (stderr)
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    logger.debug(f"Command failed: {e}")
    console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False, soft_wrap=True)
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def raise_usage(ctx: typer.Context, error: UsageError, console: Console) -> NoReturn:
    """Report a parser UsageError with the command usage line and exit 2."""
    logger.debug(f"Usage error: {error}")
    console.print(ctx.get_usage(), markup=False, highlight=False, soft_wrap=True)
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False, soft_wrap=True)
    raise typer.Exit(2)

