"""Container configuration models."""
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional, Tuple

RESTART_NEVER = "no"
RESTART_POLICIES = ("no", "always", "unless-stopped", "on-failure")

# Accepted spellings for the never-restart policy
_RESTART_ALIASES = {"never": RESTART_NEVER, "": RESTART_NEVER}


def _dedup(values: Iterable[str]) -> Tuple[str, ...]:
    return tuple(dict.fromkeys(values))


def image_reference(image: str, tag: str) -> str:
    """Join repository and tag, using ``@`` when the tag is a digest."""
    separator = "@" if ":" in tag else ":"
    return f"{image}{separator}{tag}"


def parse_restart_policy(policy: str) -> Dict[str, object]:
    """Translate a restart policy string into the daemon's policy mapping.

    Args:
        policy: "no", "never", "always", "unless-stopped", "on-failure"
            or "on-failure:N"

    Returns:
        Dict with Name and MaximumRetryCount keys

    Raises:
        ValueError: If the policy is not recognized
    """
    name = _RESTART_ALIASES.get(policy, policy)
    retries = 0
    if name.startswith("on-failure:"):
        name, _, count = name.partition(":")
        if not count.isdigit():
            raise ValueError(f"invalid retry count in restart policy '{policy}'")
        retries = int(count)
    if name not in RESTART_POLICIES:
        raise ValueError(
            f"unknown restart policy '{policy}' (expected one of: {', '.join(RESTART_POLICIES)})"
        )
    return {"Name": name, "MaximumRetryCount": retries}


@dataclass(frozen=True)
class HostConfig:
    """Host-side settings derived from a ContainerSpec."""
    network_mode: str = ""
    pid_mode: str = ""
    privileged: bool = False
    restart_policy: str = RESTART_NEVER
    binds: Tuple[str, ...] = ()
    volumes_from: Tuple[str, ...] = ()
    auto_remove: bool = False


@dataclass(frozen=True)
class ContainerSpec:
    """Immutable container-creation descriptor.

    Binds are unique by literal string (first occurrence wins); env and
    volumes_from keep order and duplicates exactly as given.
    """
    image: str
    command: Tuple[str, ...] = ()
    env: Tuple[str, ...] = ()
    name: str = ""  # empty: daemon assigns one
    network_mode: str = ""
    pid_mode: str = ""
    privileged: bool = False
    restart_policy: str = RESTART_NEVER
    binds: Tuple[str, ...] = ()
    volumes_from: Tuple[str, ...] = ()
    auto_remove: bool = False

    def __post_init__(self):
        if not self.image:
            raise ValueError("ContainerSpec requires an image")
        # frozen: normalise through object.__setattr__
        object.__setattr__(self, "command", tuple(self.command))
        object.__setattr__(self, "env", tuple(self.env))
        object.__setattr__(self, "volumes_from", tuple(self.volumes_from))
        object.__setattr__(self, "binds", _dedup(self.binds))

    def host_config(self) -> HostConfig:
        """Derive the host configuration used for create and start."""
        return HostConfig(
            network_mode=self.network_mode,
            pid_mode=self.pid_mode,
            privileged=self.privileged,
            restart_policy=self.restart_policy,
            binds=self.binds,
            volumes_from=self.volumes_from,
            auto_remove=self.auto_remove,
        )


@dataclass(frozen=True)
class ContainerHandle:
    """Identifier returned by container creation; valid until removed."""
    id: str
    warnings: Tuple[str, ...] = field(default=(), compare=False)

    def __str__(self) -> str:
        return self.id


@dataclass
class ContainerInfo:
    """Runtime information about an inspected container."""
    id: str
    image: str  # resolved image id
    configured_image: str  # image reference the container was created with
    running: bool
    state: str  # raw daemon state string
    hostname: str = ""
    domainname: str = ""
    name: Optional[str] = None

    @property
    def fqdn(self) -> str:
        return f"{self.hostname}.{self.domainname}"


def state_string(state: Dict) -> str:
    """Return the daemon's state string for an inspect ``State`` mapping.

    Older daemons do not report ``Status``; derive it from the flags the
    same way the daemon does.
    """
    status = state.get("Status")
    if status:
        return status
    if state.get("Running"):
        if state.get("Paused"):
            return "paused"
        if state.get("Restarting"):
            return "restarting"
        return "running"
    if state.get("RemovalInProgress"):
        return "removing"
    if state.get("Dead"):
        return "dead"
    started_at = state.get("StartedAt") or ""
    if not started_at or started_at.startswith("0001-01-01"):
        return "created"
    return "exited"
