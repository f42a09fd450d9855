"""Unified logging for dockutil with console and file output."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# stdout carries command results; diagnostics go to stderr
console = Console(stderr=True)

LOG_DIR = Path("/var/log/dockutil")
LOG_FILE = LOG_DIR / "dockutil.log"

_file_logging_configured = False
_console_level = logging.WARNING


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up file logging for dockutil operations.

    Args:
        log_file: Path to log file (defaults to /var/log/dockutil/dockutil.log)
        verbose: Enable debug-level logging

    Note:
        Creates log directory if it doesn't exist.
        Falls back to /tmp if /var/log/dockutil is not writable.
    """
    global _file_logging_configured

    if _file_logging_configured:
        return

    target_log_file = Path(log_file) if log_file else LOG_FILE

    try:
        target_log_file.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target_log_file = Path("/tmp/dockutil.log")

    root_logger = logging.getLogger("dockutil")
    file_handler = logging.FileHandler(target_log_file)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root_logger.addHandler(file_handler)
    root_logger.setLevel(logging.DEBUG)

    _file_logging_configured = True

    root_logger.debug(f"dockutil logging initialized: {target_log_file}")


def set_verbose(verbose: bool) -> None:
    """Switch console output between warnings only and full debug."""
    global _console_level
    _console_level = logging.DEBUG if verbose else logging.WARNING
    for name, logger in list(logging.Logger.manager.loggerDict.items()):
        if not name.startswith("dockutil") or not isinstance(logger, logging.Logger):
            continue
        for handler in logger.handlers:
            if isinstance(handler, RichHandler):
                handler.setLevel(_console_level)


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance with console output.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured logger with Rich console handler

    Note:
        The console handler shows warnings only unless set_verbose(True);
        file logging must be enabled separately via setup_file_logging()
    """
    logger = logging.getLogger(name)

    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=console, show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        handler.setLevel(_console_level)
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)

    return logger
