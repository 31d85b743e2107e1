"""Folder provisioning for PolicyBackup."""

import logging
import os
from typing import Iterable, List

from policybackup.errors import FolderError


class FolderProvisioner:
    """Creates missing folders and leaves existing ones untouched."""

    def __init__(self, logger: logging.Logger, dry_run: bool = False):
        self.logger = logger
        self.dry_run = dry_run

    def ensure_folders(self, paths: Iterable[str]) -> List[str]:
        """Create every missing folder in ``paths``, intermediate segments included.

        Returns the folders that were created (or would be, in dry-run mode).
        Raises ``FolderError`` for the first path that cannot be provisioned.
        """
        created = []
        for path in paths:
            if os.path.isdir(path):
                continue
            if os.path.exists(path):
                raise FolderError(path, FileExistsError("path exists and is not a directory"))

            if self.dry_run:
                self.logger.info("What if: create folder %s", path)
                created.append(path)
                continue

            try:
                os.makedirs(path, exist_ok=True)
            except OSError as exc:
                raise FolderError(path, exc) from exc

            self.logger.debug("Created folder: %s", path)
            created.append(path)
        return created

