"""Shared test fixtures for dockutil tests."""
from typing import Dict, List, Optional, Tuple

import pytest

from dockutil import cli_support
from dockutil.core.config import DockutilConfig, set_config
from dockutil.core.errors import DockutilError, NotFoundError
from dockutil.models.container import ContainerHandle, ContainerInfo, ContainerSpec


class FakeRuntimeClient:
    """In-memory stand-in for RuntimeClient that records every call."""

    def __init__(self):
        self.calls: List[Tuple] = []
        self.containers: Dict[str, ContainerInfo] = {}
        self.images: Dict[str, str] = {}
        self.labels: Dict[str, List[str]] = {}
        self.failures: Dict[Tuple[str, str], DockutilError] = {}
        self.attach_output = b""
        self.created: List[ContainerSpec] = []
        self._next_id = 0

    def fail(self, operation: str, target: str, error: DockutilError) -> None:
        self.failures[(operation, target)] = error

    def _record(self, operation: str, target: str, *extra) -> None:
        self.calls.append((operation, target, *extra))
        error = self.failures.get((operation, target))
        if error is not None:
            raise error

    def operations(self) -> List[str]:
        return [call[0] for call in self.calls]

    def inspect_container(self, ref: str) -> ContainerInfo:
        self._record("inspect_container", ref)
        if ref not in self.containers:
            raise NotFoundError("inspect container", ref, "No such container")
        return self.containers[ref]

    def inspect_image(self, ref: str) -> str:
        self._record("inspect_image", ref)
        if ref not in self.images:
            raise NotFoundError("inspect image", ref, "No such image")
        return self.images[ref]

    def list_containers(self, label: str) -> List[str]:
        self._record("list_containers", label)
        return list(self.labels.get(label, []))

    def create(self, spec: ContainerSpec) -> ContainerHandle:
        self._record("create", spec.image)
        self.created.append(spec)
        self._next_id += 1
        return ContainerHandle(id=f"c{self._next_id:063d}")

    def start(self, handle: ContainerHandle) -> None:
        self._record("start", handle.id)

    def stop(self, ref: str, timeout: int) -> None:
        self._record("stop", ref, timeout)

    def kill(self, ref: str, signal: str) -> None:
        self._record("kill", ref, signal)

    def remove(self, ref: str, force: bool = False, remove_volumes: bool = False) -> None:
        self._record("remove", ref, force, remove_volumes)

    def attach_capture(self, handle: ContainerHandle) -> bytes:
        self._record("attach_capture", handle.id)
        return self.attach_output

    def pull(self, image: str, tag: str) -> None:
        self._record("pull", image, tag)


def _make_info(
    ident: str = "f" * 64,
    image: str = "sha256:" + "a" * 64,
    configured_image: str = "nginx:1.25",
    running: bool = True,
    state: Optional[str] = None,
    hostname: str = "web",
    domainname: str = "weave.local",
) -> ContainerInfo:
    return ContainerInfo(
        id=ident,
        image=image,
        configured_image=configured_image,
        running=running,
        state=state or ("running" if running else "exited"),
        hostname=hostname,
        domainname=domainname,
    )


@pytest.fixture
def make_info():
    """Factory for ContainerInfo values with sensible defaults."""
    return _make_info


@pytest.fixture
def config():
    """Deterministic configuration installed as the global config."""
    cfg = DockutilConfig()
    set_config(cfg)
    yield cfg
    set_config(None)


@pytest.fixture
def fake_client():
    return FakeRuntimeClient()


@pytest.fixture
def cli_client(monkeypatch, fake_client, config):
    """Route every CLI command to the fake client."""
    monkeypatch.setattr(cli_support, "get_runtime_client", lambda config=None: fake_client)
    return fake_client
