"""Reader for the manifest.xml written by Backup-GPO."""

import os
from typing import Optional
from xml.etree import ElementTree as ET

from policybackup.errors import BackupError
from policybackup.models import BackupManifest, GpoManifestEntry

MANIFEST_FILE_NAME = "manifest.xml"


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1] if "}" in tag else tag


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name:
            return (child.text or "").strip() or None
    return None


class ManifestReader:
    """Turns a GPO backup manifest into one entry per exported GPO."""

    def manifest_path(self, backup_dir: str) -> str:
        return os.path.join(backup_dir, MANIFEST_FILE_NAME)

    def read(self, backup_dir: str) -> BackupManifest:
        path = self.manifest_path(backup_dir)
        if not os.path.exists(path):
            return BackupManifest(path=path)

        try:
            root = ET.parse(path).getroot()
        except (ET.ParseError, OSError) as exc:
            raise BackupError(f"Could not read GPO manifest '{path}': {exc}") from exc

        manifest = BackupManifest(path=path)
        for element in root.iter():
            if _local_name(element.tag) != "BackupInst":
                continue
            manifest.entries.append(
                GpoManifestEntry(
                    display_name=_child_text(element, "GPODisplayName") or "",
                    gpo_id=_child_text(element, "GPOGuid") or "",
                    backup_id=_child_text(element, "ID") or "",
                    backup_time=_child_text(element, "BackupTime"),
                )
            )
        return manifest
