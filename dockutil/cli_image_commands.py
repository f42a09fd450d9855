"""Image CLI commands: pulling and version probing."""
from __future__ import annotations

import typer
from rich.console import Console

from dockutil import cli_support
from dockutil.core.errors import DockutilError


def register_image_commands(root: typer.Typer, console: Console) -> None:
    """Attach image-related commands to the main CLI."""

    @root.command("pull-image")
    def pull_image_command(
        reference: str = typer.Argument(..., help="Image to pull, optionally with :tag.", metavar="IMAGE[:TAG]"),
    ) -> None:
        """Pull an image; the tag defaults to "latest"."""
        lifecycle = cli_support.get_lifecycle()
        target = lifecycle.resolve_pull_target(reference)
        if target.defaulted:
            cli_support.emit(f"Using default tag: {target.tag}", newline=True)
        label = target.reference if target.digest else target.tag
        cli_support.emit(f"{label}: Pulling from {target.image}", newline=True)

        try:
            lifecycle.pull(target)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("ask-version")
    def ask_version_command(
        ref: str = typer.Argument(..., help="Container or image to probe.", metavar="CONTAINER_OR_IMAGE"),
    ) -> None:
        """Run IMAGE --version in a throwaway container and print its output."""
        lifecycle = cli_support.get_lifecycle()
        try:
            output = lifecycle.ask_version(ref)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

        cli_support.emit(output)
