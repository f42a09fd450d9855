"""Unit tests for the RuntimeClient facade."""
from unittest.mock import MagicMock

import pytest
import requests
from docker.errors import APIError, DockerException, ImageNotFound, NotFound

from dockutil.core.config import DockutilConfig
from dockutil.core.errors import DaemonConnectionError, NotFoundError, OperationError
from dockutil.models.container import ContainerHandle, ContainerSpec
from dockutil.services.docker import client as client_module
from dockutil.services.docker.client import RuntimeClient


@pytest.fixture
def api():
    api = MagicMock()
    api.api_version = "1.41"
    api.create_host_config.side_effect = lambda **kwargs: dict(kwargs)
    return api


@pytest.fixture
def client(api):
    return RuntimeClient(config=DockutilConfig(), api=api)


INSPECT = {
    "Id": "f" * 64,
    "Name": "/web",
    "Image": "sha256:" + "a" * 64,
    "Config": {"Image": "nginx:1.25", "Hostname": "web", "Domainname": "weave.local"},
    "State": {"Status": "running", "Running": True},
}


class TestInspect:

    def test_inspect_container(self, client, api):
        api.inspect_container.return_value = INSPECT

        info = client.inspect_container("web")

        api.inspect_container.assert_called_once_with("web")
        assert info.id == "f" * 64
        assert info.image == "sha256:" + "a" * 64
        assert info.configured_image == "nginx:1.25"
        assert info.running is True
        assert info.state == "running"
        assert info.fqdn == "web.weave.local"
        assert info.name == "web"

    def test_inspect_container_not_found(self, client, api):
        api.inspect_container.side_effect = NotFound("404", explanation="No such container: ghost")

        with pytest.raises(NotFoundError) as excinfo:
            client.inspect_container("ghost")

        assert str(excinfo.value) == "unable to inspect container ghost: No such container: ghost"

    def test_inspect_image(self, client, api):
        api.inspect_image.return_value = {"Id": "sha256:beef"}
        assert client.inspect_image("myorg/agent") == "sha256:beef"

    def test_inspect_image_not_found(self, client, api):
        api.inspect_image.side_effect = ImageNotFound("404", explanation="No such image")
        with pytest.raises(NotFoundError):
            client.inspect_image("ghost")

    def test_list_containers_includes_stopped(self, client, api):
        api.containers.return_value = [{"Id": "a"}, {"Id": "b"}]

        assert client.list_containers("weave.role=router") == ["a", "b"]
        api.containers.assert_called_once_with(
            all=True, quiet=True, filters={"label": ["weave.role=router"]}
        )


class TestCreate:

    def test_create_passes_spec_and_host_config(self, client, api):
        api.create_container.return_value = {"Id": "abc", "Warnings": None}
        spec = ContainerSpec(
            image="nginx",
            command=("nginx", "-g", "daemon off;"),
            env=("A=1", "A=1"),
            name="web",
            network_mode="host",
            privileged=True,
            restart_policy="on-failure:2",
            binds=("/a:/a",),
            volumes_from=("data",),
        )

        handle = client.create(spec)

        assert handle == ContainerHandle(id="abc")
        api.create_host_config.assert_called_once_with(
            binds=["/a:/a"],
            volumes_from=["data"],
            network_mode="host",
            pid_mode=None,
            privileged=True,
            restart_policy={"Name": "on-failure", "MaximumRetryCount": 2},
            auto_remove=False,
        )
        kwargs = api.create_container.call_args.kwargs
        assert kwargs["image"] == "nginx"
        assert kwargs["command"] == ["nginx", "-g", "daemon off;"]
        assert kwargs["environment"] == ["A=1", "A=1"]
        assert kwargs["name"] == "web"
        assert kwargs["host_config"]["network_mode"] == "host"

    def test_empty_name_lets_daemon_choose(self, client, api):
        api.create_container.return_value = {"Id": "abc"}
        client.create(ContainerSpec(image="nginx", command=("nginx",)))
        assert api.create_container.call_args.kwargs["name"] is None

    def test_auto_remove_dropped_for_old_daemons(self, client, api):
        api.api_version = "1.24"
        api.create_container.return_value = {"Id": "abc"}

        client.create(ContainerSpec(image="img", auto_remove=True))

        assert api.create_host_config.call_args.kwargs["auto_remove"] is False

    def test_auto_remove_kept_for_current_daemons(self, client, api):
        api.create_container.return_value = {"Id": "abc"}
        client.create(ContainerSpec(image="img", auto_remove=True))
        assert api.create_host_config.call_args.kwargs["auto_remove"] is True

    def test_create_rejected(self, client, api):
        api.create_container.side_effect = APIError("409", explanation="Conflict. The name is in use")

        with pytest.raises(OperationError) as excinfo:
            client.create(ContainerSpec(image="nginx", name="web"))

        assert excinfo.value.target == "nginx"
        assert "name is in use" in str(excinfo.value)


class TestLifecycleCalls:

    def test_start(self, client, api):
        client.start(ContainerHandle(id="abc"))
        api.start.assert_called_once_with("abc")

    def test_stop(self, client, api):
        client.stop("abc", 10)
        api.stop.assert_called_once_with("abc", timeout=10)

    def test_kill(self, client, api):
        client.kill("abc", "SIGKILL")
        api.kill.assert_called_once_with("abc", signal="SIGKILL")

    def test_remove(self, client, api):
        client.remove("abc", force=True, remove_volumes=True)
        api.remove_container.assert_called_once_with("abc", v=True, force=True)

    def test_attach_capture_waits_for_stream_end(self, client, api):
        api.attach.return_value = iter([b"agent ", b"1.2", b".3\n"])

        assert client.attach_capture(ContainerHandle(id="abc")) == b"agent 1.2.3\n"
        api.attach.assert_called_once_with("abc", stdout=True, stderr=True, stream=True, logs=True)

    def test_attach_capture_empty_stream(self, client, api):
        api.attach.return_value = iter([])
        assert client.attach_capture(ContainerHandle(id="abc")) == b""

    def test_attach_stream_broken_midway(self, client, api):
        def chunks():
            yield b"agent "
            raise requests.exceptions.ConnectionError("connection reset")

        api.attach.return_value = chunks()

        with pytest.raises(DaemonConnectionError) as excinfo:
            client.attach_capture(ContainerHandle(id="abc"))

        assert excinfo.value.operation == "attach to container"

    def test_connection_refused(self, client, api):
        api.stop.side_effect = requests.exceptions.ConnectionError("connection refused")

        with pytest.raises(DaemonConnectionError) as excinfo:
            client.stop("abc", 10)

        assert excinfo.value.operation == "stop container"
        assert excinfo.value.target == "abc"


class TestPull:

    def test_pull_success(self, client, api):
        api.pull.return_value = iter([{"status": "Pulling from library/redis", "id": "latest"}, {"status": "Done"}])

        client.pull("redis", "latest")

        api.pull.assert_called_once_with("redis", tag="latest", stream=True, decode=True)

    def test_pull_stream_error(self, client, api):
        api.pull.return_value = iter([
            {"status": "Pulling"},
            {"error": "manifest unknown", "errorDetail": {"message": "manifest for redis:nope not found"}},
        ])

        with pytest.raises(OperationError) as excinfo:
            client.pull("redis", "nope")

        assert str(excinfo.value) == "unable to pull image redis:nope: manifest for redis:nope not found"

    def test_pull_digest_error_target(self, client, api):
        digest = "sha256:" + "e" * 64
        api.pull.return_value = iter([{"error": "manifest unknown"}])

        with pytest.raises(OperationError) as excinfo:
            client.pull("redis", digest)

        assert excinfo.value.target == f"redis@{digest}"
        api.pull.assert_called_once_with("redis", tag=digest, stream=True, decode=True)


class TestConnect:

    def test_connect_failure(self, monkeypatch):
        def broken(**kwargs):
            raise DockerException("Error while fetching server API version")

        monkeypatch.setattr(client_module, "kwargs_from_env", lambda: {})
        monkeypatch.setattr(client_module.docker, "APIClient", broken)

        client = RuntimeClient(config=DockutilConfig())
        with pytest.raises(DaemonConnectionError) as excinfo:
            client.inspect_container("web")

        assert "fetching server API version" in str(excinfo.value)

    def test_connect_uses_config(self, monkeypatch):
        captured = {}

        def fake_api(**kwargs):
            captured.update(kwargs)
            return MagicMock()

        monkeypatch.setattr(client_module, "kwargs_from_env", lambda: {"base_url": "tcp://10.0.0.1:2375"})
        monkeypatch.setattr(client_module.docker, "APIClient", fake_api)

        RuntimeClient(config=DockutilConfig(api_version="1.41", daemon_timeout=5.0)).api

        assert captured == {"version": "1.41", "timeout": 5.0, "base_url": "tcp://10.0.0.1:2375"}
