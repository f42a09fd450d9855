"""Error taxonomy shared by the runtime client, workflows and CLI."""
from typing import Optional


class DockutilError(RuntimeError):
    """Base error carrying the failing operation and its target.

    Rendered as ``unable to <operation> <target>: <detail>`` so the CLI
    can print it verbatim.
    """

    def __init__(self, operation: str, target: str, detail: Optional[str] = None):
        self.operation = operation
        self.target = target
        self.detail = detail
        super().__init__(self._render())

    def _render(self) -> str:
        message = f"unable to {self.operation}"
        if self.target:
            message += f" {self.target}"
        if self.detail:
            message += f": {self.detail}"
        return message


class UsageError(DockutilError):
    """Malformed or insufficient command-line input."""

    def __init__(self, operation: str, detail: str):
        super().__init__(operation, "", detail)

    def _render(self) -> str:
        return f"{self.operation}: {self.detail}"


class DaemonConnectionError(DockutilError):
    """The runtime daemon could not be reached."""


class NotFoundError(DockutilError):
    """Referenced container or image does not exist."""


class OperationError(DockutilError):
    """The daemon rejected an operation; detail holds its message."""
