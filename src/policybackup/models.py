"""Shared domain models for PolicyBackup."""

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

FOLDER_STAMP_FORMAT = "%Y-%m-%d_%H%M"


class LogLevel(Enum):
    """Severities written to the run log, backed by stdlib logging levels."""

    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARN = logging.WARNING
    ERROR = logging.ERROR
    FATAL = logging.CRITICAL

    @classmethod
    def from_levelno(cls, levelno: int) -> "LogLevel":
        for level in reversed(list(cls)):
            if levelno >= level.value:
                return level
        return cls.DEBUG


class RunState(Enum):
    INIT = "init"
    CONFIG_RESOLVED = "config_resolved"
    LOG_READY = "log_ready"
    ADMX_DONE = "admx_done"
    GPO_DONE = "gpo_done"
    FINISHED = "finished"


class RunStatus(Enum):
    COMPLETED = "completed"
    COMPLETED_WITH_ERRORS = "completed_with_errors"
    NOTHING_REQUESTED = "nothing_requested"
    ABORTED = "aborted"


EXIT_CODES = {
    RunStatus.COMPLETED: 0,
    RunStatus.NOTHING_REQUESTED: 0,
    RunStatus.ABORTED: 1,
    RunStatus.COMPLETED_WITH_ERRORS: 2,
}


@dataclass(frozen=True)
class RunConfig:
    """Run parameters resolved once at startup."""

    destination_root: str
    backup_admx: bool
    backup_gpo: bool
    domain_name: str
    run_timestamp: datetime

    @property
    def requested(self) -> bool:
        return self.backup_admx or self.backup_gpo

    @property
    def folder_stamp(self) -> str:
        return self.run_timestamp.strftime(FOLDER_STAMP_FORMAT)


@dataclass(frozen=True)
class BackupDestinations:
    """Folders derived from the run timestamp under the destination root."""

    admx_root: str
    sysvol_admx: str
    local_admx: str
    gpo_root: str

    @classmethod
    def for_run(cls, config: RunConfig) -> "BackupDestinations":
        admx_root = os.path.join(config.destination_root, f"ADMX-{config.folder_stamp}")
        return cls(
            admx_root=admx_root,
            sysvol_admx=os.path.join(admx_root, "SYSVOL-ADMXBackup"),
            local_admx=os.path.join(admx_root, "Local-ADMXBackup"),
            gpo_root=os.path.join(config.destination_root, f"GPOBackup-{config.folder_stamp}"),
        )


@dataclass(frozen=True)
class GpoManifestEntry:
    display_name: str
    gpo_id: str
    backup_id: str
    backup_time: Optional[str] = None


@dataclass
class BackupManifest:
    path: str
    entries: List[GpoManifestEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class TaskResult:
    """Outcome of one backup task."""

    name: str
    failures: List[str] = field(default_factory=list)
    attempted: int = 0
    manifest: Optional[BackupManifest] = None

    @property
    def status(self) -> str:
        if not self.failures:
            return "success"
        if len(self.failures) < self.attempted:
            return "partial"
        return "failed"

    @property
    def ok(self) -> bool:
        return not self.failures
