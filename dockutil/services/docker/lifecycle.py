"""Container lifecycle workflows (run, version probe, stop/kill/remove, pull)."""
from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional, Tuple

from docker.utils import parse_repository_tag

from dockutil.core.config import DockutilConfig, get_config
from dockutil.core.errors import DockutilError, NotFoundError
from dockutil.core.logger import get_logger
from dockutil.models.container import ContainerHandle, ContainerSpec, image_reference

logger = get_logger(__name__)

VERSION_FLAG = "--version"
PROBE_NETWORK_MODE = "none"


@dataclass(frozen=True)
class PullTarget:
    """Repository and tag resolved from a pull reference."""
    image: str
    tag: str
    defaulted: bool = False

    @property
    def digest(self) -> bool:
        return ":" in self.tag

    @property
    def reference(self) -> str:
        return image_reference(self.image, self.tag)


def split_image_reference(reference: str, default_tag: str = "latest") -> PullTarget:
    """Split ``image[:tag]`` into repository and tag.

    A registry port (``host:5000/img``) is not mistaken for a tag, and a
    digest (``img@sha256:...``) is kept as the tag part.
    """
    repository, tag = parse_repository_tag(reference)
    if tag:
        return PullTarget(image=repository, tag=tag)
    return PullTarget(image=repository, tag=default_tag, defaulted=True)


class ContainerLifecycle:
    """Sequences daemon calls for the container-creating subcommands."""

    def __init__(self, client, config: Optional[DockutilConfig] = None):
        """Initialize lifecycle workflows.

        Args:
            client: RuntimeClient (or anything with the same methods)
            config: Runtime configuration (defaults to the global config)
        """
        self.client = client
        self.config = config or get_config()

    def run(self, spec: ContainerSpec) -> str:
        """Create and start a container, returning its id.

        A container whose start fails is left in place for the operator;
        the start error propagates unchanged.
        """
        handle = self.client.create(spec)
        try:
            self.client.start(handle)
        except DockutilError:
            logger.warning(f"Container {handle.id} was created but failed to start; leaving it in place")
            raise
        return handle.id

    def resolve_probe_image(self, ref: str) -> str:
        """Resolve ``ref`` to an image, first as a container then as an image.

        Raises:
            NotFoundError: If ``ref`` names neither a container nor an image
        """
        lookups: List[Tuple[str, Callable[[str], str]]] = [
            ("container", lambda r: self.client.inspect_container(r).image),
            ("image", self.client.inspect_image),
        ]
        misses = []
        for kind, lookup in lookups:
            try:
                image = lookup(ref)
            except NotFoundError as exc:
                misses.append(f"no {kind} ({exc.detail or 'not found'})")
                continue
            logger.debug(f"Resolved {ref} as {kind} -> {image}")
            return image
        raise NotFoundError("find container or image", ref, "; ".join(misses))

    def probe_spec(self, image: str) -> ContainerSpec:
        return ContainerSpec(
            image=image,
            command=(VERSION_FLAG,),
            env=(self.config.probe_env,),
            network_mode=PROBE_NETWORK_MODE,
            auto_remove=True,
        )

    def ask_version(self, ref: str) -> bytes:
        """Run ``<image> --version`` in a throwaway container and return its output.

        The probe container is removed exactly once after the attach,
        whether or not the output was captured. Nothing bounds the attach:
        a probe that never exits blocks here.
        """
        image = self.resolve_probe_image(ref)
        handle = self.client.create(self.probe_spec(image))
        self.client.start(handle)

        try:
            output = self.client.attach_capture(handle)
        except DockutilError:
            try:
                self._remove_probe(handle)
            except DockutilError as exc:
                logger.warning(f"Could not remove probe container {handle.id[:12]}: {exc}")
            raise

        self._remove_probe(handle)
        return output

    def _remove_probe(self, handle: ContainerHandle) -> None:
        # Old daemons ignore AutoRemove, so always remove explicitly
        try:
            self.client.remove(handle.id, force=True)
        except NotFoundError:
            logger.debug(f"Probe container {handle.id[:12]} already auto-removed")

    def stop_all(self, ids: Iterable[str], timeout: Optional[int] = None) -> None:
        """Stop each container in order; the first failure aborts the rest."""
        grace = self.config.stop_timeout if timeout is None else timeout
        for container_id in ids:
            self.client.stop(container_id, grace)
            logger.debug(f"Stopped {container_id}")

    def kill_all(self, ids: Iterable[str], signal: Optional[str] = None) -> None:
        """Signal each container in order; the first failure aborts the rest."""
        signal = signal or self.config.kill_signal
        for container_id in ids:
            self.client.kill(container_id, signal)
            logger.debug(f"Sent {signal} to {container_id}")

    def remove_all(self, ids: Iterable[str], force: bool = False, remove_volumes: bool = False) -> None:
        """Remove each container in order; the first failure aborts the rest."""
        for container_id in ids:
            self.client.remove(container_id, force=force, remove_volumes=remove_volumes)
            logger.debug(f"Removed {container_id}")

    def resolve_pull_target(self, reference: str) -> PullTarget:
        return split_image_reference(reference, self.config.default_tag)

    def pull(self, target: PullTarget) -> None:
        self.client.pull(target.image, target.tag)
