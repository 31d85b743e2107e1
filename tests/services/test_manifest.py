import pytest

from policybackup.errors import BackupError
from policybackup.services.manifest import ManifestReader

MANIFEST_XML = """<?xml version="1.0" encoding="utf-8"?>
<Backups xmlns:xsd="http://www.w3.org/2001/XMLSchema" xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance"
    xmlns="http://www.microsoft.com/GroupPolicy/GPOOperations/Manifest" mf:version="1"
    xmlns:mf="http://www.microsoft.com/GroupPolicy/GPOOperations/Manifest">
  <BackupInst>
    <GPOGuid><![CDATA[{31B2F340-016D-11D2-945F-00C04FB984F9}]]></GPOGuid>
    <GPODomain><![CDATA[corp.example.com]]></GPODomain>
    <BackupTime><![CDATA[2024-02-25T10:30:12]]></BackupTime>
    <ID><![CDATA[{8A7D1E7A-5C2B-4E46-9B1F-0E6D3A1B2C3D}]]></ID>
    <Comment><![CDATA[]]></Comment>
    <GPODisplayName><![CDATA[Default Domain Policy]]></GPODisplayName>
  </BackupInst>
  <BackupInst>
    <GPOGuid><![CDATA[{6AC1786C-016F-11D2-945F-00C04FB984F9}]]></GPOGuid>
    <GPODomain><![CDATA[corp.example.com]]></GPODomain>
    <BackupTime><![CDATA[2024-02-25T10:30:14]]></BackupTime>
    <ID><![CDATA[{F0E1D2C3-B4A5-4968-8776-655443322110}]]></ID>
    <Comment><![CDATA[]]></Comment>
    <GPODisplayName><![CDATA[Default Domain Controllers Policy]]></GPODisplayName>
  </BackupInst>
</Backups>
"""


def test_read_returns_one_entry_per_backup_instance(tmp_path):
    (tmp_path / "manifest.xml").write_text(MANIFEST_XML, encoding="utf-8")

    manifest = ManifestReader().read(str(tmp_path))

    assert len(manifest) == 2
    assert manifest.path == str(tmp_path / "manifest.xml")
    first = manifest.entries[0]
    assert first.display_name == "Default Domain Policy"
    assert first.gpo_id == "{31B2F340-016D-11D2-945F-00C04FB984F9}"
    assert first.backup_id == "{8A7D1E7A-5C2B-4E46-9B1F-0E6D3A1B2C3D}"
    assert first.backup_time == "2024-02-25T10:30:12"


def test_missing_manifest_yields_empty_manifest(tmp_path):
    manifest = ManifestReader().read(str(tmp_path))

    assert len(manifest) == 0


def test_corrupt_manifest_raises_backup_error(tmp_path):
    (tmp_path / "manifest.xml").write_text("<Backups><BackupInst>", encoding="utf-8")

    with pytest.raises(BackupError, match="Could not read GPO manifest"):
        ManifestReader().read(str(tmp_path))
