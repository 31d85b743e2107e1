"""Domain errors for PolicyBackup."""


class PolicyBackupError(RuntimeError):
    """Base class for errors raised while backing up domain policies."""


class InvalidConfigError(PolicyBackupError):
    """Raised when run options are missing or invalid."""


class DirectoryUnavailableError(PolicyBackupError):
    """Raised when the domain name cannot be resolved from the directory service."""


class LogInitError(PolicyBackupError):
    """Raised when the run log file cannot be created."""


class CommandError(PolicyBackupError):
    """Raised when an external command cannot run or exits with a failure code."""


class BackupError(PolicyBackupError):
    """Raised when a copy or export operation fails."""


class FolderError(PolicyBackupError):
    """Raised when a folder cannot be provisioned."""

    def __init__(self, path: str, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not create folder '{path}': {cause}")
