"""Container state resolution against an expected image."""
import re
from typing import Optional, Protocol

from dockutil.core.logger import get_logger
from dockutil.models.container import ContainerInfo

logger = get_logger(__name__)

RUNNING_MISMATCH_PREFIX = "running image mismatch: "
MISMATCH_PREFIX = "image mismatch: "


class ImageMatcher(Protocol):
    """Decides whether an image reference satisfies a pattern."""

    def matches(self, pattern: str, image: str) -> bool:
        ...


class RegexImageMatcher:
    """Unanchored regular-expression search.

    An invalid pattern matches nothing.
    """

    def matches(self, pattern: str, image: str) -> bool:
        try:
            return re.search(pattern, image) is not None
        except re.error as exc:
            logger.warning(f"Ignoring invalid image pattern '{pattern}': {exc}")
            return False


class ExactImageMatcher:
    """Literal string equality."""

    def matches(self, pattern: str, image: str) -> bool:
        return pattern == image


def describe_state(
    info: ContainerInfo,
    pattern: Optional[str] = None,
    matcher: Optional[ImageMatcher] = None,
) -> str:
    """Render the state of an inspected container.

    Without a pattern the raw daemon state string is returned. With one,
    the resolved image and the configured image are both tried; when
    neither matches the result names the configured image and tells a
    running container apart from a stopped one.
    """
    if pattern is None:
        return info.state

    matcher = matcher or RegexImageMatcher()
    if matcher.matches(pattern, info.image) or matcher.matches(pattern, info.configured_image):
        return info.state

    prefix = RUNNING_MISMATCH_PREFIX if info.running else MISMATCH_PREFIX
    return f"{prefix}{info.configured_image}"


def container_state(
    client,
    ref: str,
    pattern: Optional[str] = None,
    matcher: Optional[ImageMatcher] = None,
) -> str:
    """Inspect ``ref`` and describe its state against ``pattern``."""
    return describe_state(client.inspect_container(ref), pattern, matcher)


def container_id(client, ref: str) -> str:
    """Resolve a container name or short id to its full id."""
    return client.inspect_container(ref).id


def container_fqdn(client, ref: str) -> str:
    """Return ``<hostname>.<domainname>`` for a container."""
    return client.inspect_container(ref).fqdn
