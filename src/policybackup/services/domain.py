"""Domain name lookup through the ActiveDirectory PowerShell module."""

from typing import List, Optional

from policybackup.errors import CommandError, DirectoryUnavailableError
from policybackup.errors_catalog import actionable_error

POWERSHELL = "powershell.exe"


def powershell_command(script: str) -> List[str]:
    return [POWERSHELL, "-NoProfile", "-NonInteractive", "-Command", script]


class DomainResolver:
    """Resolves the DNS name of the domain the current machine belongs to."""

    LOOKUP_SCRIPT = (
        "Import-Module ActiveDirectory -ErrorAction Stop; "
        "(Get-ADDomain -Current LocalComputer -ErrorAction Stop).DNSRoot"
    )

    def __init__(self, command_runner, logger, timeout: Optional[float] = 120.0):
        self.command_runner = command_runner
        self.logger = logger
        self.timeout = timeout

    def resolve(self, override: Optional[str] = None) -> str:
        if override is not None:
            domain = override.strip()
            if not domain:
                raise DirectoryUnavailableError(
                    actionable_error("domain_lookup_failed", reason="an empty domain name was given")
                )
            self.logger.debug("Using domain name from options: %s", domain)
            return domain

        try:
            result = self.command_runner.run(
                powershell_command(self.LOOKUP_SCRIPT),
                check=True,
                capture_output=True,
                timeout=self.timeout,
            )
        except CommandError as exc:
            raise DirectoryUnavailableError(
                actionable_error("domain_lookup_failed", reason=str(exc))
            ) from exc

        lines = [line.strip() for line in (result.stdout or "").splitlines() if line.strip()]
        if not lines:
            raise DirectoryUnavailableError(
                actionable_error("domain_lookup_failed", reason="the lookup returned no domain name")
            )
        return lines[-1]
