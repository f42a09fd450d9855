"""Container inspection and lifecycle CLI commands."""
from __future__ import annotations

from typing import List, Optional

import typer
from rich.console import Console

from dockutil import cli_support
from dockutil.config.run_parser import parse_run_args
from dockutil.core.errors import DockutilError, UsageError
from dockutil.services.docker.resolver import (
    ExactImageMatcher,
    RegexImageMatcher,
    container_fqdn,
    container_id,
    container_state,
)

# Flags are parsed by dockutil itself; the option parser must hand them over untouched
RUN_CONTEXT_SETTINGS = {
    "allow_extra_args": True,
    "ignore_unknown_options": True,
    "allow_interspersed_args": False,
}


def register_container_commands(root: typer.Typer, console: Console) -> None:
    """Attach container-related commands to the main CLI."""

    @root.command("container-id")
    def container_id_command(
        ref: str = typer.Argument(..., help="Container name or (short) id.", metavar="NAME_OR_ID"),
    ) -> None:
        """Print the full id of a container."""
        client = cli_support.get_runtime_client()
        try:
            cli_support.emit(container_id(client, ref))
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("container-state")
    def container_state_command(
        ref: str = typer.Argument(..., help="Container name or id.", metavar="CONTAINER_ID"),
        image_pattern: Optional[str] = typer.Argument(
            None, help="Expected image (regular expression, unanchored).", metavar="IMAGE_PATTERN"
        ),
        exact: bool = typer.Option(False, "--exact", help="Compare the image literally instead of as a regex."),
    ) -> None:
        """Print the container state, or an image mismatch message.

        With IMAGE_PATTERN the state is printed only when the pattern matches
        the container's resolved or configured image; otherwise the output is
        "running image mismatch: <image>" or "image mismatch: <image>".
        """
        matcher = ExactImageMatcher() if exact else RegexImageMatcher()
        client = cli_support.get_runtime_client()
        try:
            cli_support.emit(container_state(client, ref, image_pattern, matcher))
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("container-fqdn")
    def container_fqdn_command(
        ref: str = typer.Argument(..., help="Container name or id.", metavar="CONTAINER_ID"),
    ) -> None:
        """Print <hostname>.<domainname> of a container."""
        client = cli_support.get_runtime_client()
        try:
            cli_support.emit(container_fqdn(client, ref))
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("list-containers")
    def list_containers_command(
        label: str = typer.Argument(..., help="Label filter (key or key=value).", metavar="LABEL"),
    ) -> None:
        """Print ids of all containers (stopped included) carrying LABEL, one per line."""
        client = cli_support.get_runtime_client()
        try:
            for ident in client.list_containers(label):
                cli_support.emit(ident, newline=True)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("run-container", context_settings=RUN_CONTEXT_SETTINGS)
    def run_container_command(ctx: typer.Context) -> None:
        """Create and start a container, printing its id.

        Usage: run-container [flags] IMAGE CMD...

        \b
        Flags (parsing stops at the first non-flag):
          -e, --env KEY=VAL        environment variable (repeatable)
          --name NAME              container name
          --net MODE               network mode
          --pid MODE               pid namespace mode
          --privileged             run privileged
          --restart POLICY         restart policy (default: no)
          -v, --volume BIND        bind mount (repeatable, duplicates dropped)
          --volumes-from ID        mount volumes of another container (repeatable)
        """
        try:
            spec, _ = parse_run_args(tuple(ctx.args))
        except UsageError as exc:
            cli_support.raise_usage(ctx, exc, console)

        lifecycle = cli_support.get_lifecycle()
        try:
            cli_support.emit(lifecycle.run(spec))
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("stop-container")
    def stop_container_command(
        ids: List[str] = typer.Argument(..., help="Containers to stop, in order.", metavar="CONTAINER_ID..."),
    ) -> None:
        """Stop containers with a fixed grace period; stops at the first failure."""
        lifecycle = cli_support.get_lifecycle()
        try:
            lifecycle.stop_all(ids)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("kill-container")
    def kill_container_command(
        ids: List[str] = typer.Argument(..., help="Containers to kill, in order.", metavar="CONTAINER_ID..."),
    ) -> None:
        """Send the kill signal to containers; stops at the first failure."""
        lifecycle = cli_support.get_lifecycle()
        try:
            lifecycle.kill_all(ids)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)

    @root.command("remove-container")
    def remove_container_command(
        ids: List[str] = typer.Argument(..., help="Containers to remove, in order.", metavar="CONTAINER_ID..."),
        force: bool = typer.Option(False, "--force", "-f", help="Remove running containers too."),
        volumes: bool = typer.Option(False, "--volumes", "-v", help="Remove anonymous volumes as well."),
    ) -> None:
        """Remove containers; stops at the first failure."""
        lifecycle = cli_support.get_lifecycle()
        try:
            lifecycle.remove_all(ids, force=force, remove_volumes=volumes)
        except DockutilError as exc:
            cli_support.handle_cli_error(exc, console)
