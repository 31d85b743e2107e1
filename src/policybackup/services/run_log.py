"""Append-only run log with a console mirror.

Every record goes through the ``policybackup`` stdlib logger. A file handler
appends ``<timestamp> | <LEVEL> | <message>`` lines to a per-run file under a
monthly folder, and a console handler renders the same records with ``rich``.
"""

import logging
import os
from datetime import datetime
from typing import Optional

from rich.console import Console
from rich.markup import escape

from policybackup.errors import FolderError, LogInitError
from policybackup.errors_catalog import actionable_error
from policybackup.models import LogLevel

LINE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

CONSOLE_STYLES = {
    LogLevel.DEBUG: "dim",
    LogLevel.INFO: "blue",
    LogLevel.WARN: "bold yellow",
    LogLevel.ERROR: "bold red",
    LogLevel.FATAL: "bold white on red",
}

CONSOLE_LEVELS = {LogLevel.INFO, LogLevel.WARN, LogLevel.ERROR}


class RunLogFormatter(logging.Formatter):
    """Formats records as ``<timestamp> | <LEVEL> | <message>``."""

    def __init__(self):
        super().__init__(datefmt=LINE_TIMESTAMP_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        level = LogLevel.from_levelno(record.levelno)
        message = " ".join(record.getMessage().splitlines())
        return f"{self.formatTime(record, self.datefmt)} | {level.name} | {message}"


class ConsoleMirrorHandler(logging.Handler):
    """Echoes run log records to the console with per-level presentation."""

    def __init__(self, console: Console, verbose: bool = False):
        super().__init__(level=logging.DEBUG)
        self.console = console
        self.verbose = verbose

    def emit(self, record: logging.LogRecord):
        level = LogLevel.from_levelno(record.levelno)
        if level not in CONSOLE_LEVELS and not self.verbose:
            return
        try:
            message = escape(record.getMessage())
            style = CONSOLE_STYLES[level]
            prefix = "" if level is LogLevel.INFO else f"{level.name}: "
            self.console.print(f"[{style}]{prefix}{message}[/{style}]")
        except Exception:
            self.handleError(record)


class RunLog:
    """Owns the handlers of the ``policybackup`` logger for one run."""

    def __init__(
        self,
        console: Console,
        verbose: bool = False,
        logger_name: str = "policybackup",
    ):
        self.console = console
        self.verbose = verbose
        self.logger = logging.getLogger(logger_name)
        self.logger.setLevel(logging.DEBUG)
        self.logger.propagate = False
        self.log_file: Optional[str] = None
        self._handlers = []

        self._attach(ConsoleMirrorHandler(console, verbose=verbose))

    @staticmethod
    def log_path_for(logs_root: str, hostname: str, started_at: datetime) -> str:
        month_dir = os.path.join(logs_root, started_at.strftime("%Y-%m"))
        file_name = f"{hostname}-{started_at.strftime('%Y-%m-%d_%H.%M')}.txt"
        return os.path.join(month_dir, file_name)

    def open(self, logs_root: str, hostname: str, started_at: datetime, provisioner) -> str:
        """Create the monthly folder and attach the append-only file handler."""
        path = self.log_path_for(logs_root, hostname, started_at)
        try:
            provisioner.ensure_folders([os.path.dirname(path)])
            file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        except (FolderError, OSError) as exc:
            raise LogInitError(actionable_error("log_init_failed", path=path, reason=str(exc))) from exc

        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(RunLogFormatter())
        self._attach(file_handler)
        self.log_file = path
        return path

    def close(self):
        for handler in self._handlers:
            self.logger.removeHandler(handler)
            handler.close()
        self._handlers = []

    def _attach(self, handler: logging.Handler):
        self.logger.addHandler(handler)
        self._handlers.append(handler)
