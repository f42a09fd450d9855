"""Data models for dockutil."""
from dockutil.models.container import (
    ContainerHandle,
    ContainerInfo,
    ContainerSpec,
    HostConfig,
    image_reference,
    parse_restart_policy,
    state_string,
)

__all__ = [
    'ContainerHandle',
    'ContainerInfo',
    'ContainerSpec',
    'HostConfig',
    'image_reference',
    'parse_restart_policy',
    'state_string',
]
