"""Flag parsing for container-creating subcommands.

Walks an argument sequence with a cursor and never mutates it. Flags are
described by a table of :class:`FlagSpec` entries; parsing stops at the
first token that is not a recognized flag, and everything from there on
is positional.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from dockutil.core.errors import UsageError
from dockutil.models.container import ContainerSpec, parse_restart_policy


class FlagMode(Enum):
    """How repeated occurrences of a flag combine."""
    APPEND_UNIQUE = "append-unique"
    APPEND = "append"
    OVERWRITE = "overwrite"


@dataclass(frozen=True)
class FlagSpec:
    """A recognized flag: its destination, aliases, arity and mode."""
    dest: str
    names: Tuple[str, ...]
    arity: int = 1
    mode: FlagMode = FlagMode.OVERWRITE

    def initial(self):
        if self.mode is FlagMode.OVERWRITE:
            return False if self.arity == 0 else None
        return []


@dataclass(frozen=True)
class ParseResult:
    """Parsed flag values plus residual positionals in input order."""
    values: Dict[str, object]
    positional: Tuple[str, ...]


RUN_FLAGS: Tuple[FlagSpec, ...] = (
    FlagSpec("env", ("-e", "--env"), mode=FlagMode.APPEND),
    FlagSpec("name", ("--name",)),
    FlagSpec("network_mode", ("--net",)),
    FlagSpec("pid_mode", ("--pid",)),
    FlagSpec("privileged", ("--privileged",), arity=0),
    FlagSpec("restart_policy", ("--restart",)),
    FlagSpec("binds", ("-v", "--volume"), mode=FlagMode.APPEND_UNIQUE),
    FlagSpec("volumes_from", ("--volumes-from",), mode=FlagMode.APPEND),
)


def _index(table: Sequence[FlagSpec]) -> Dict[str, FlagSpec]:
    index: Dict[str, FlagSpec] = {}
    for spec in table:
        for name in spec.names:
            index[name] = spec
    return index


def _split_token(token: str) -> Tuple[str, Optional[str]]:
    """Split ``--flag=value``; short flags and bare tokens pass through."""
    if token.startswith("--") and "=" in token:
        name, _, value = token.partition("=")
        return name, value
    return token, None


def parse_args(
    args: Sequence[str],
    table: Sequence[FlagSpec],
    operation: str,
    min_positional: int = 0,
) -> ParseResult:
    """Parse leading flags from ``args`` according to ``table``.

    Args:
        args: Raw argument sequence (left untouched)
        table: Recognized flags
        operation: Operation name used in error messages
        min_positional: Required number of residual positionals

    Returns:
        ParseResult with one entry per flag dest

    Raises:
        UsageError: On a missing flag value or too few positionals
    """
    index = _index(table)
    values: Dict[str, object] = {spec.dest: spec.initial() for spec in table}
    cursor = 0

    while cursor < len(args):
        token = args[cursor]
        if token == "--":
            cursor += 1
            break

        name, inline_value = _split_token(token)
        spec = index.get(name)
        if spec is None:
            break
        cursor += 1

        if spec.arity == 0:
            if inline_value is not None:
                raise UsageError(operation, f"flag {name} does not take a value")
            values[spec.dest] = True
            continue

        if inline_value is None:
            if cursor >= len(args):
                raise UsageError(operation, f"flag {name} requires a value")
            inline_value = args[cursor]
            cursor += 1

        if spec.mode is FlagMode.OVERWRITE:
            values[spec.dest] = inline_value
            continue

        accumulated: List[str] = values[spec.dest]  # type: ignore[assignment]
        if spec.mode is FlagMode.APPEND_UNIQUE and inline_value in accumulated:
            continue
        accumulated.append(inline_value)

    positional = tuple(args[cursor:])
    if len(positional) < min_positional:
        raise UsageError(
            operation,
            f"expected at least {min_positional} positional argument(s), got {len(positional)}",
        )

    frozen = {
        key: tuple(value) if isinstance(value, list) else value
        for key, value in values.items()
    }
    return ParseResult(values=frozen, positional=positional)


def parse_run_args(args: Sequence[str]) -> Tuple[ContainerSpec, Tuple[str, ...]]:
    """Build a ContainerSpec from ``run-container`` arguments.

    Requires an image and at least one command token after the flags.

    Returns:
        Tuple of (spec, positional) where positional[0] is the image
    """
    result = parse_args(args, RUN_FLAGS, "run-container", min_positional=2)
    values = result.values

    restart_policy = values["restart_policy"] or "no"
    try:
        parse_restart_policy(restart_policy)
    except ValueError as exc:
        raise UsageError("run-container", str(exc)) from exc

    image, *command = result.positional
    spec = ContainerSpec(
        image=image,
        command=tuple(command),
        env=values["env"],
        name=values["name"] or "",
        network_mode=values["network_mode"] or "",
        pid_mode=values["pid_mode"] or "",
        privileged=bool(values["privileged"]),
        restart_policy=restart_policy,
        binds=values["binds"],
        volumes_from=values["volumes_from"],
    )
    return spec, result.positional
