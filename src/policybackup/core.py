import getpass
import logging
import os
import socket
import time
from datetime import datetime
from typing import Callable, List, Optional

from rich.console import Console

from .errors import (
    DirectoryUnavailableError,
    InvalidConfigError,
    LogInitError,
    PolicyBackupError,
)
from .models import EXIT_CODES, BackupDestinations, RunConfig, RunState, RunStatus, TaskResult
from .services.admx import AdmxBackupService
from .services.command_runner import CommandRunner
from .services.domain import DomainResolver
from .services.filesystem import FolderProvisioner
from .services.gpo import GpoBackupService
from .services.run_config import RunConfigResolver
from .services.run_log import RunLog

console = Console()
logger = logging.getLogger("policybackup")
logger.addHandler(logging.NullHandler())

MIN_RETRY_COUNT = 2
MIN_RETRY_WAIT_SECONDS = 1


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"


class PolicyBackup:
    def __init__(
        self,
        destination: Optional[str],
        backup_admx: bool = False,
        backup_gpo: bool = False,
        verbose: bool = False,
        dry_run: bool = False,
        logs_dir: Optional[str] = None,
        domain: Optional[str] = None,
        sysvol_root: Optional[str] = None,
        local_policy_definitions: Optional[str] = None,
        retry_count: int = 2,
        retry_wait_seconds: int = 5,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.destination = destination
        self.backup_admx = backup_admx
        self.backup_gpo = backup_gpo
        self.verbose = verbose
        self.dry_run = dry_run
        self.logs_dir = logs_dir or os.path.join(os.getcwd(), "Logs")
        self.domain = domain
        self.retry_count = self._check_minimum(retry_count, MIN_RETRY_COUNT, "--retry-count")
        self.retry_wait_seconds = self._check_minimum(
            retry_wait_seconds,
            MIN_RETRY_WAIT_SECONDS,
            "--retry-wait-seconds",
        )
        self.hostname = socket.gethostname()
        self.user = _current_user()

        self.state = RunState.INIT
        self.state_history: List[RunState] = [RunState.INIT]
        self.status: Optional[RunStatus] = None
        self.config: Optional[RunConfig] = None
        self.destinations: Optional[BackupDestinations] = None
        self.results: List[TaskResult] = []

        self.run_log = RunLog(console=console, verbose=verbose)
        self.command_runner = CommandRunner(logger=logger)
        self.provisioner = FolderProvisioner(logger=logger, dry_run=dry_run)
        self.domain_resolver = DomainResolver(command_runner=self.command_runner, logger=logger)
        self.config_resolver = RunConfigResolver(domain_resolver=self.domain_resolver, clock=clock)
        self.admx_service = AdmxBackupService(
            command_runner=self.command_runner,
            provisioner=self.provisioner,
            logger=logger,
            sysvol_root=sysvol_root,
            local_policy_definitions=local_policy_definitions,
            retry_count=self.retry_count,
            retry_wait_seconds=self.retry_wait_seconds,
            dry_run=dry_run,
        )
        self.gpo_service = GpoBackupService(
            command_runner=self.command_runner,
            provisioner=self.provisioner,
            logger=logger,
            dry_run=dry_run,
        )

    @staticmethod
    def _check_minimum(value: int, minimum: int, option_name: str) -> int:
        if int(value) < minimum:
            raise InvalidConfigError(f"{option_name} must be at least {minimum}.")
        return int(value)

    def _transition(self, state: RunState):
        logger.debug("Run state: %s -> %s", self.state.value, state.value)
        self.state = state
        self.state_history.append(state)

    def resolve_config(self) -> RunConfig:
        return self.config_resolver.resolve(
            destination=self.destination,
            backup_admx=self.backup_admx,
            backup_gpo=self.backup_gpo,
            domain=self.domain,
        )

    def open_log(self):
        """Attach the run log file; falls back to console-only output."""
        if self.dry_run:
            console.print("[yellow]Dry run: no log file is written.[/yellow]")
            return
        try:
            path = self.run_log.open(
                logs_root=self.logs_dir,
                hostname=self.hostname,
                started_at=self.config.run_timestamp,
                provisioner=self.provisioner,
            )
        except LogInitError as exc:
            console.print(f"[bold yellow]WARN:[/bold yellow] {exc}")
            console.print("[yellow]Continuing with console output only.[/yellow]")
            return
        logger.debug("Logging to %s", path)

    def log_banner(self):
        config = self.config
        logger.info("Domain policy backup started at %s", config.run_timestamp.isoformat(sep=" "))
        logger.info("Host: %s, user: %s, domain: %s", self.hostname, self.user, config.domain_name)
        logger.info(
            "Destination: %s (ADMX: %s, GPO: %s%s)",
            config.destination_root,
            "yes" if config.backup_admx else "no",
            "yes" if config.backup_gpo else "no",
            ", dry run" if self.dry_run else "",
        )
        if self.run_log.log_file:
            logger.info("Log file: %s", self.run_log.log_file)

    def run_admx(self) -> TaskResult:
        try:
            result = self.admx_service.backup(self.config, self.destinations)
        except PolicyBackupError as exc:
            logger.error("ADMX backup failed: %s", exc)
            result = TaskResult(name="admx", failures=[str(exc)], attempted=1)
        except Exception as exc:
            logger.error("ADMX backup failed unexpectedly: %s", exc)
            result = TaskResult(name="admx", failures=[str(exc)], attempted=1)
        self.results.append(result)
        return result

    def run_gpo(self) -> TaskResult:
        try:
            result = self.gpo_service.backup(self.destinations.gpo_root, self.config.domain_name)
        except PolicyBackupError as exc:
            logger.error("GPO backup failed: %s", exc)
            result = TaskResult(name="gpo", failures=[str(exc)], attempted=1)
        except Exception as exc:
            logger.error("GPO backup failed unexpectedly: %s", exc)
            result = TaskResult(name="gpo", failures=[str(exc)], attempted=1)
        self.results.append(result)
        return result

    def run(self) -> int:
        started = time.monotonic()

        try:
            self.config = self.resolve_config()
        except (InvalidConfigError, DirectoryUnavailableError) as exc:
            console.print(f"[bold red]Error:[/bold red] {exc}")
            self.run_log.close()
            self.status = RunStatus.ABORTED
            return EXIT_CODES[self.status]
        except KeyboardInterrupt:
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            self.run_log.close()
            self.status = RunStatus.ABORTED
            return EXIT_CODES[self.status]

        self.destinations = BackupDestinations.for_run(self.config)
        self._transition(RunState.CONFIG_RESOLVED)

        try:
            self.open_log()
            self._transition(RunState.LOG_READY)
            self.log_banner()

            if not self.config.requested:
                logger.warning(
                    "No backup requested. Pass --backup-admx and/or --backup-gpo to back up policies."
                )
                self.status = RunStatus.NOTHING_REQUESTED
                return EXIT_CODES[self.status]

            if self.config.backup_admx:
                self.run_admx()
                self._transition(RunState.ADMX_DONE)

            if self.config.backup_gpo:
                self.run_gpo()
                self._transition(RunState.GPO_DONE)

            failed = [result.name for result in self.results if not result.ok]
            if failed:
                logger.info("Backup tasks with errors: %s", ", ".join(failed))
                self.status = RunStatus.COMPLETED_WITH_ERRORS
            else:
                self.status = RunStatus.COMPLETED
            return EXIT_CODES[self.status]

        except KeyboardInterrupt:
            logger.critical("Operation cancelled by user.")
            console.print("[bold red]Operation cancelled by user.[/bold red]")
            self.status = RunStatus.ABORTED
            return EXIT_CODES[self.status]
        except Exception as exc:
            logger.critical("Unexpected error: %s", exc)
            console.print(f"[bold red]Unexpected error:[/bold red] {exc}")
            self.status = RunStatus.ABORTED
            return EXIT_CODES[self.status]
        finally:
            elapsed = time.monotonic() - started
            self._transition(RunState.FINISHED)
            logger.info(
                "Run finished with status '%s' in %.1f seconds.",
                self.status.value,
                elapsed,
            )
            self.run_log.close()
