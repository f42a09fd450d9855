"""dockutil runtime configuration and settings."""
import os
from dataclasses import dataclass
from typing import Optional


def _optional_float(value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    return float(value)


@dataclass
class DockutilConfig:
    """Runtime configuration for dockutil operations.

    Attributes:
        api_version: Daemon API version to negotiate ("auto" asks the daemon)
        daemon_timeout: Client socket timeout in seconds (None = wait forever)
        stop_timeout: Grace period handed to the daemon when stopping (default: 10)
        kill_signal: Signal sent by kill-container (default: SIGKILL)
        probe_env: Marker variable given to version probe containers
        default_tag: Tag used when pull-image gets a bare repository
        log_file: Optional log file path
    """

    api_version: str = "auto"
    daemon_timeout: Optional[float] = None
    stop_timeout: int = 10
    kill_signal: str = "SIGKILL"

    # Keeps the network plugin from attaching probe containers
    probe_env: str = "WEAVE_CIDR=none"

    default_tag: str = "latest"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "DockutilConfig":
        """Create config from environment variables.

        Environment variables:
            DOCKUTIL_API_VERSION: Daemon API version
            DOCKUTIL_DAEMON_TIMEOUT: Client socket timeout in seconds
            DOCKUTIL_STOP_TIMEOUT: Stop grace period in seconds
            DOCKUTIL_KILL_SIGNAL: Signal used by kill-container
            DOCKUTIL_PROBE_ENV: KEY=VALUE marker for version probes
            DOCKUTIL_DEFAULT_TAG: Default image tag
            DOCKUTIL_LOG_FILE: Log file path

        Connection settings (DOCKER_HOST, DOCKER_TLS_VERIFY, DOCKER_CERT_PATH)
        are read by the Docker SDK itself.

        Returns:
            DockutilConfig instance with values from environment or defaults
        """
        return cls(
            api_version=os.getenv("DOCKUTIL_API_VERSION", cls.api_version),
            daemon_timeout=_optional_float(os.getenv("DOCKUTIL_DAEMON_TIMEOUT")),
            stop_timeout=int(os.getenv("DOCKUTIL_STOP_TIMEOUT", cls.stop_timeout)),
            kill_signal=os.getenv("DOCKUTIL_KILL_SIGNAL", cls.kill_signal),
            probe_env=os.getenv("DOCKUTIL_PROBE_ENV", cls.probe_env),
            default_tag=os.getenv("DOCKUTIL_DEFAULT_TAG", cls.default_tag),
            log_file=os.getenv("DOCKUTIL_LOG_FILE") or None,
        )


# Global config instance (can be overridden)
_config: Optional[DockutilConfig] = None


def get_config() -> DockutilConfig:
    """Get the global dockutil configuration.

    Returns:
        DockutilConfig instance (creates from environment if not set)
    """
    global _config
    if _config is None:
        _config = DockutilConfig.from_env()
    return _config


def set_config(config: Optional[DockutilConfig]) -> None:
    """Override the global configuration (None resets to environment)."""
    global _config
    _config = config
