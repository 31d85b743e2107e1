"""ADMX policy-definition backup through robocopy mirroring."""

import os
from typing import List, Optional, Tuple

from policybackup.errors import BackupError, CommandError, FolderError
from policybackup.errors_catalog import actionable_error
from policybackup.models import BackupDestinations, RunConfig, TaskResult

# robocopy reports 0-7 for copies that completed, 8 and above for failures.
ROBOCOPY_SUCCESS_CODES = range(0, 8)


def default_system_root() -> str:
    return os.environ.get("SystemRoot", r"C:\Windows")


class AdmxBackupService:
    """Mirrors the SYSVOL and local PolicyDefinitions folders into the backup root."""

    def __init__(
        self,
        command_runner,
        provisioner,
        logger,
        sysvol_root: Optional[str] = None,
        local_policy_definitions: Optional[str] = None,
        retry_count: int = 2,
        retry_wait_seconds: int = 5,
        dry_run: bool = False,
    ):
        self.command_runner = command_runner
        self.provisioner = provisioner
        self.logger = logger
        self.sysvol_root = sysvol_root or os.path.join(default_system_root(), "SYSVOL")
        self.local_policy_definitions = local_policy_definitions or os.path.join(
            default_system_root(), "PolicyDefinitions"
        )
        self.retry_count = retry_count
        self.retry_wait_seconds = retry_wait_seconds
        self.dry_run = dry_run

    def sysvol_source(self, domain_name: str) -> str:
        return os.path.join(self.sysvol_root, "sysvol", domain_name, "Policies", "PolicyDefinitions")

    def copy_plan(self, config: RunConfig, destinations: BackupDestinations) -> List[Tuple[str, str, str]]:
        return [
            ("SYSVOL", self.sysvol_source(config.domain_name), destinations.sysvol_admx),
            ("local", self.local_policy_definitions, destinations.local_admx),
        ]

    def build_robocopy_cmd(self, source: str, destination: str) -> List[str]:
        cmd = [
            "robocopy",
            source,
            destination,
            "/MIR",
            f"/R:{self.retry_count}",
            f"/W:{self.retry_wait_seconds}",
            "/NFL",
            "/NDL",
            "/NJH",
            "/NJS",
            "/NP",
        ]
        if self.dry_run:
            cmd.append("/L")
        return cmd

    def backup(self, config: RunConfig, destinations: BackupDestinations) -> TaskResult:
        """Copy both policy-definition folders, tolerating a failure on either one."""
        result = TaskResult(name="admx")

        for label, source, destination in self.copy_plan(config, destinations):
            result.attempted += 1
            try:
                self.provisioner.ensure_folders([destination])
                self.logger.info("Backing up %s ADMX files from %s to %s", label, source, destination)
                self.mirror(source, destination)
            except (FolderError, BackupError) as exc:
                self.logger.error("%s ADMX backup failed: %s", label, exc)
                result.failures.append(str(exc))

        copied = result.attempted - len(result.failures)
        self.logger.info(
            "ADMX backup finished: %s of %s folders copied to %s",
            copied,
            result.attempted,
            destinations.admx_root,
        )
        return result

    def mirror(self, source: str, destination: str):
        if not os.path.isdir(source):
            raise BackupError(actionable_error("admx_source_unreachable", path=source))

        try:
            self.command_runner.run(
                self.build_robocopy_cmd(source, destination),
                check=True,
                capture_output=True,
                success_returncodes=ROBOCOPY_SUCCESS_CODES,
            )
        except CommandError as exc:
            raise BackupError(
                actionable_error(
                    "copy_failed",
                    source=source,
                    destination=destination,
                    reason=str(exc),
                )
            ) from exc
