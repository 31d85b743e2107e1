"""Resolution of run options into an immutable RunConfig."""

import os
from datetime import datetime
from typing import Callable, Optional

from policybackup.errors import InvalidConfigError
from policybackup.errors_catalog import actionable_error
from policybackup.models import RunConfig


class RunConfigResolver:
    """Validates the destination first, then resolves the domain name."""

    def __init__(self, domain_resolver, clock: Callable[[], datetime] = datetime.now):
        self.domain_resolver = domain_resolver
        self.clock = clock

    def validate_destination(self, destination: Optional[str]) -> str:
        if not destination:
            raise InvalidConfigError("Missing required option '--destination' (or provide it in config).")

        path = os.path.abspath(os.path.expanduser(destination))
        if not os.path.exists(path):
            raise InvalidConfigError(actionable_error("destination_missing", path=path))
        if not os.path.isdir(path):
            raise InvalidConfigError(actionable_error("destination_not_directory", path=path))
        return path

    def resolve(
        self,
        destination: Optional[str],
        backup_admx: bool = False,
        backup_gpo: bool = False,
        domain: Optional[str] = None,
    ) -> RunConfig:
        destination_root = self.validate_destination(destination)
        domain_name = self.domain_resolver.resolve(domain)
        return RunConfig(
            destination_root=destination_root,
            backup_admx=bool(backup_admx),
            backup_gpo=bool(backup_gpo),
            domain_name=domain_name,
            run_timestamp=self.clock(),
        )
