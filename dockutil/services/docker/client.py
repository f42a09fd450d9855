"""Runtime client facade over the Docker Engine API.

Wraps the low-level ``docker.APIClient`` and translates SDK and transport
failures into the dockutil error taxonomy. Every call is a single
blocking request; nothing here retries.
"""
from contextlib import contextmanager
from typing import Iterator, List, Optional

import docker
import requests
from docker.errors import APIError, DockerException, NotFound
from docker.utils import kwargs_from_env, version_lt

from dockutil.core.config import DockutilConfig, get_config
from dockutil.core.errors import DaemonConnectionError, NotFoundError, OperationError
from dockutil.core.logger import get_logger
from dockutil.models.container import (
    ContainerHandle,
    ContainerInfo,
    ContainerSpec,
    HostConfig,
    image_reference,
    parse_restart_policy,
    state_string,
)

logger = get_logger(__name__)

# Daemons older than this reject AutoRemove in the host config
AUTO_REMOVE_MIN_API = "1.25"


def _explain(exc: Exception) -> str:
    explanation = getattr(exc, "explanation", None)
    if explanation:
        return explanation.decode() if isinstance(explanation, bytes) else str(explanation)
    return str(exc)


@contextmanager
def daemon_call(operation: str, target: str) -> Iterator[None]:
    """Translate SDK exceptions raised inside the block.

    Args:
        operation: Verb phrase for the error message (e.g. "inspect container")
        target: Container id, image reference or label
    """
    try:
        yield
    except NotFound as exc:
        raise NotFoundError(operation, target, _explain(exc)) from exc
    except APIError as exc:
        raise OperationError(operation, target, _explain(exc)) from exc
    except requests.exceptions.ConnectionError as exc:
        raise DaemonConnectionError(operation, target, str(exc)) from exc
    except DockerException as exc:
        raise OperationError(operation, target, str(exc)) from exc


class RuntimeClient:
    """Narrow set of daemon operations used by the dockutil workflows."""

    def __init__(self, config: Optional[DockutilConfig] = None, api: Optional[docker.APIClient] = None):
        """Initialize the client.

        Args:
            config: Runtime configuration (defaults to the global config)
            api: Pre-built SDK client; when omitted one is created from the
                environment on first use
        """
        self.config = config or get_config()
        self._api = api

    @property
    def api(self) -> docker.APIClient:
        if self._api is None:
            self._api = self._connect()
        return self._api

    def _connect(self) -> docker.APIClient:
        try:
            kwargs = kwargs_from_env()
            host = kwargs.get("base_url") or "local docker socket"
            logger.debug(f"Connecting to docker daemon at {host} (API {self.config.api_version})")
            return docker.APIClient(
                version=self.config.api_version,
                timeout=self.config.daemon_timeout,
                **kwargs,
            )
        except (DockerException, requests.exceptions.ConnectionError) as exc:
            raise DaemonConnectionError("connect to", "docker daemon", str(exc)) from exc

    # Inspection

    def inspect_container(self, ref: str) -> ContainerInfo:
        """Inspect a container by name, full id or short id."""
        with daemon_call("inspect container", ref):
            data = self.api.inspect_container(ref)

        config = data.get("Config") or {}
        state = data.get("State") or {}
        return ContainerInfo(
            id=data.get("Id", ""),
            image=data.get("Image", ""),
            configured_image=config.get("Image", ""),
            running=bool(state.get("Running")),
            state=state_string(state),
            hostname=config.get("Hostname", ""),
            domainname=config.get("Domainname", ""),
            name=(data.get("Name") or "").lstrip("/") or None,
        )

    def inspect_image(self, ref: str) -> str:
        """Return the id of an image given its name or id."""
        with daemon_call("inspect image", ref):
            data = self.api.inspect_image(ref)
        return data.get("Id", "")

    def list_containers(self, label: str) -> List[str]:
        """Return ids of all containers, stopped ones included, carrying ``label``."""
        with daemon_call("list containers by label", label):
            containers = self.api.containers(all=True, quiet=True, filters={"label": [label]})
        return [container["Id"] for container in containers]

    # Lifecycle

    def _host_config(self, host: HostConfig) -> dict:
        auto_remove = host.auto_remove
        if auto_remove and version_lt(self.api.api_version, AUTO_REMOVE_MIN_API):
            logger.debug(
                f"Daemon API {self.api.api_version} predates auto-remove; relying on explicit removal"
            )
            auto_remove = False

        return self.api.create_host_config(
            binds=list(host.binds) or None,
            volumes_from=list(host.volumes_from) or None,
            network_mode=host.network_mode or None,
            pid_mode=host.pid_mode or None,
            privileged=host.privileged,
            restart_policy=parse_restart_policy(host.restart_policy),
            auto_remove=auto_remove,
        )

    def create(self, spec: ContainerSpec) -> ContainerHandle:
        """Create (but do not start) a container from ``spec``."""
        with daemon_call("create container from image", spec.image):
            response = self.api.create_container(
                image=spec.image,
                command=list(spec.command) or None,
                environment=list(spec.env) or None,
                name=spec.name or None,
                host_config=self._host_config(spec.host_config()),
            )

        warnings = tuple(response.get("Warnings") or ())
        for warning in warnings:
            logger.warning(f"Daemon warning for {spec.image}: {warning}")

        handle = ContainerHandle(id=response["Id"], warnings=warnings)
        logger.debug(f"Created container {handle.id[:12]} from {spec.image}")
        return handle

    def start(self, handle: ContainerHandle) -> None:
        """Start a created container.

        Host configuration is bound at creation; the daemon rejects
        start-time host configuration on every supported API version.
        """
        with daemon_call("start container", handle.id):
            self.api.start(handle.id)
        logger.debug(f"Started container {handle.id[:12]}")

    def stop(self, ref: str, timeout: int) -> None:
        with daemon_call("stop container", ref):
            self.api.stop(ref, timeout=timeout)

    def kill(self, ref: str, signal: str) -> None:
        with daemon_call("kill container", ref):
            self.api.kill(ref, signal=signal)

    def remove(self, ref: str, force: bool = False, remove_volumes: bool = False) -> None:
        with daemon_call("remove container", ref):
            self.api.remove_container(ref, v=remove_volumes, force=force)

    def attach_capture(self, handle: ContainerHandle) -> bytes:
        """Capture the combined output stream of a started container.

        Blocks until the stream ends (the process exits). Output written
        before the attach is included.
        """
        with daemon_call("attach to container", handle.id):
            chunks = self.api.attach(
                handle.id, stdout=True, stderr=True, stream=True, logs=True
            )
            return b"".join(chunks)

    def pull(self, image: str, tag: str) -> None:
        """Pull ``image:tag``; errors reported inside the progress stream are raised."""
        target = image_reference(image, tag)
        with daemon_call("pull image", target):
            for event in self.api.pull(image, tag=tag, stream=True, decode=True):
                if "error" in event:
                    detail = event.get("errorDetail", {}).get("message") or event["error"]
                    raise OperationError("pull image", target, detail)
                status = event.get("status")
                if status:
                    logger.debug(f"{event.get('id', image)}: {status}")
