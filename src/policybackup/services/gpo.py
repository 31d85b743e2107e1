"""GPO export through the GroupPolicy PowerShell module."""

import os
from typing import List, Optional

from policybackup.errors import BackupError, CommandError
from policybackup.errors_catalog import actionable_error
from policybackup.models import BackupManifest, TaskResult
from policybackup.services.domain import powershell_command
from policybackup.services.manifest import ManifestReader

GPO_LIST_FILE_NAME = "GPOBackupList.txt"


def _ps_quote(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


class GpoBackupService:
    """Exports every GPO in the domain with Backup-GPO."""

    def __init__(
        self,
        command_runner,
        provisioner,
        logger,
        manifest_reader: Optional[ManifestReader] = None,
        timeout: Optional[float] = None,
        dry_run: bool = False,
    ):
        self.command_runner = command_runner
        self.provisioner = provisioner
        self.logger = logger
        self.manifest_reader = manifest_reader or ManifestReader()
        self.timeout = timeout
        self.dry_run = dry_run

    def build_export_script(self, destination: str, domain_name: str) -> str:
        # Only the module import is terminating; Backup-GPO reports a failing GPO and moves on.
        list_path = os.path.join(destination, GPO_LIST_FILE_NAME)
        return (
            "Import-Module GroupPolicy -ErrorAction Stop; "
            f"Backup-GPO -All -Path {_ps_quote(destination)} -Domain {_ps_quote(domain_name)} | "
            "Select-Object DisplayName, GpoId, Id, CreationTime | "
            "Format-Table -AutoSize | "
            f"Out-File -FilePath {_ps_quote(list_path)} -Encoding utf8 -Width 4096; "
            "exit 0"
        )

    def build_export_cmd(self, destination: str, domain_name: str) -> List[str]:
        return powershell_command(self.build_export_script(destination, domain_name))

    def backup(self, destination: str, domain_name: str) -> TaskResult:
        result = TaskResult(name="gpo", attempted=1)
        self.provisioner.ensure_folders([destination])

        if self.dry_run:
            self.logger.info("What if: export all GPOs of %s to %s", domain_name, destination)
            result.manifest = BackupManifest(path=self.manifest_reader.manifest_path(destination))
            return result

        self.logger.info("Exporting all GPOs of %s to %s", domain_name, destination)
        try:
            self.command_runner.run(
                self.build_export_cmd(destination, domain_name),
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except CommandError as exc:
            raise BackupError(
                actionable_error("gpo_export_failed", path=destination, reason=str(exc))
            ) from exc

        manifest = self.manifest_reader.read(destination)
        result.manifest = manifest
        self.logger.info(
            "GPO backup finished: %s GPOs exported to %s (list: %s)",
            len(manifest),
            destination,
            os.path.join(destination, GPO_LIST_FILE_NAME),
        )
        return result
