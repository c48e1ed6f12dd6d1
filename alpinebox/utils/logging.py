"""Unified logging for alpinebox.

This module provides:
1. Centralized logging configuration
2. Debug mode via ALPINEBOX_DEBUG env var or programmatic flag
3. Log levels via ALPINEBOX_LOG_LEVEL env var
4. Severity-tagged console lines ([INFO], [SUCCESS], [WARNING], [ERROR], [VERSION])
5. Rotating file log that survives the reboot at the end of a run

Usage:
    from alpinebox.utils.logging import get_logger, configure_logging

    # In CLI entry point:
    configure_logging(debug=args.debug)

    # In any module:
    logger = get_logger(__name__)
    logger.info("Checking for Alpine Linux version updates...")
    logger.version("Current Alpine Linux version: 3.19.1")
    logger.error("Failed to upgrade", exc=exception)

Environment Variables:
    ALPINEBOX_DEBUG=1          Enable debug mode (verbose output)
    ALPINEBOX_LOG_LEVEL=DEBUG  Set log level (DEBUG, INFO, WARNING, ERROR)
    ALPINEBOX_LOG_FILE=/path   Override log file location
    ALPINEBOX_DAEMON=1         Plain [TAG] lines on stderr, no Rich formatting
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape

# Global state
_configured = False
_debug_mode = False
_daemon_mode = False
_log_file: Optional[Path] = None

# Shared Rich console instance
console = Console(highlight=False)

# Custom log levels for provisioning output
SUCCESS_LEVEL = 25
VERSION_LEVEL = 22
logging.addLevelName(SUCCESS_LEVEL, "SUCCESS")
logging.addLevelName(VERSION_LEVEL, "VERSION")

DEFAULT_LOG_FILE = Path("/var/log/alpinebox/provision.log")

# Console tag colours, matching the severity names written to the log file
_TAG_STYLES = {
    "DEBUG": "dim",
    "INFO": "blue",
    "SUCCESS": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "VERSION": "cyan",
}


def _get_log_file() -> Path:
    """Get the log file path, creating its directory if needed."""
    global _log_file
    if _log_file:
        return _log_file

    env_log_file = os.environ.get("ALPINEBOX_LOG_FILE")
    _log_file = Path(env_log_file) if env_log_file else DEFAULT_LOG_FILE
    _log_file.parent.mkdir(parents=True, exist_ok=True)
    return _log_file


def is_debug_mode() -> bool:
    """Check if debug mode is enabled."""
    return _debug_mode or os.environ.get("ALPINEBOX_DEBUG", "").lower() in ("1", "true", "yes")


def is_daemon_mode() -> bool:
    """Check if plain stderr output is requested (unattended hooks, log capture)."""
    return _daemon_mode or os.environ.get("ALPINEBOX_DAEMON", "").lower() in ("1", "true", "yes")


def configure_logging(
    debug: bool = False,
    daemon: bool = False,
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> None:
    """Configure the logging system.

    Should be called once at application startup. Later calls only raise
    the debug flag so that ``--debug`` still works after an import-time
    default configuration.

    Args:
        debug: Enable debug mode (verbose output, debug to console)
        daemon: Daemon mode (stderr only, no Rich formatting)
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Override log file path
    """
    global _configured, _debug_mode, _daemon_mode, _log_file

    if _configured:
        if debug:
            _debug_mode = True
            logging.getLogger("alpinebox").setLevel(logging.DEBUG)
        return

    _debug_mode = debug or is_debug_mode()
    _daemon_mode = daemon or is_daemon_mode()

    if log_file:
        _log_file = log_file

    if log_level:
        level_name = log_level.upper()
    else:
        level_name = os.environ.get(
            "ALPINEBOX_LOG_LEVEL", "DEBUG" if _debug_mode else "INFO"
        ).upper()

    level = getattr(logging, level_name, logging.INFO)

    root_logger = logging.getLogger("alpinebox")
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    # File handler with rotation (always enabled, captures all logs)
    try:
        file_handler = RotatingFileHandler(
            _get_log_file(),
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        root_logger.addHandler(file_handler)
    except (OSError, PermissionError):
        # Not running privileged, continue without a log file
        pass

    _configured = True

    root_logger.debug(
        f"Logging configured: level={level_name}, debug={_debug_mode}, daemon={_daemon_mode}"
    )


class ProvisionLogger:
    """Severity-tagged logging with Rich console output.

    Every call goes to the ``logging`` tree (and so the log file) and is
    echoed to the console as ``[TAG] message``.
    """

    def __init__(self, name: str):
        """Create a logger for the given module name.

        Args:
            name: Module name (typically __name__)
        """
        self.name = name
        self.logger = logging.getLogger(name)
        self.console = console

    def _emit(self, tag: str, message: str) -> None:
        if is_daemon_mode():
            print(f"[{tag}] {message}", file=sys.stderr)
        else:
            style = _TAG_STYLES.get(tag, "white")
            self.console.print(f"[{style}]\\[{tag}][/{style}] {escape(message)}")

    def debug(self, message: str, console_output: bool = False) -> None:
        """Log debug message.

        Debug only goes to the log file unless console_output is set or
        ALPINEBOX_DEBUG is enabled.
        """
        self.logger.debug(message)
        if console_output or is_debug_mode():
            self._emit("DEBUG", message)

    def info(self, message: str, console_output: bool = True) -> None:
        """Log info message."""
        self.logger.info(message)
        if console_output:
            self._emit("INFO", message)

    def success(self, message: str, console_output: bool = True) -> None:
        """Log success message (green output)."""
        self.logger.log(SUCCESS_LEVEL, message)
        if console_output:
            self._emit("SUCCESS", message)

    def version(self, message: str, console_output: bool = True) -> None:
        """Log a version report (cyan output)."""
        self.logger.log(VERSION_LEVEL, message)
        if console_output:
            self._emit("VERSION", message)

    def warning(self, message: str, console_output: bool = True) -> None:
        """Log warning message (yellow output)."""
        self.logger.warning(message)
        if console_output:
            self._emit("WARNING", message)

    def error(
        self,
        message: str,
        exc: Optional[Exception] = None,
        console_output: bool = True,
    ) -> None:
        """Log error message (red output).

        Args:
            message: Error message
            exc: Optional exception to include in log
            console_output: Output to console
        """
        if exc:
            self.logger.error(f"{message}: {exc}", exc_info=exc)
            error_msg = f"{message}: {exc}"
        else:
            self.logger.error(message)
            error_msg = message

        if console_output:
            self._emit("ERROR", error_msg)

    def exception(self, message: str, console_output: bool = True) -> None:
        """Log exception with full traceback.

        Call this from within an except block.
        """
        self.logger.exception(message)
        if console_output:
            self._emit("ERROR", message)
            if is_debug_mode() and not is_daemon_mode():
                self.console.print_exception()


def get_logger(name: str) -> ProvisionLogger:
    """Get or create a logger for a module.

    Args:
        name: Module name (typically __name__)

    Returns:
        ProvisionLogger instance
    """
    if not _configured:
        configure_logging()

    if not name.startswith("alpinebox"):
        name = f"alpinebox.{name}"

    return ProvisionLogger(name)


def log_startup_info() -> None:
    """Log startup diagnostic information (call from main entry points)."""
    logger = get_logger("alpinebox.startup")
    logger.debug(f"Python: {sys.version}")
    logger.debug(f"Platform: {sys.platform}")
    logger.debug(f"CWD: {os.getcwd()}")
    logger.debug(f"Debug mode: {is_debug_mode()}")
    logger.debug(f"Log file: {_log_file}")

    for var in ["ALPINEBOX_DEBUG", "ALPINEBOX_DAEMON", "ALPINEBOX_LOG_LEVEL", "ALPINEBOX_CONFIG"]:
        value = os.environ.get(var)
        if value:
            logger.debug(f"ENV {var}={value}")
