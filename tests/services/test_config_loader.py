import pytest

from policybackup.errors import InvalidConfigError
from policybackup.services.config_loader import ConfigLoader


def test_config_loader_loads_yaml_mapping(tmp_path):
    config_file = tmp_path / ".policybackup.yml"
    config_file.write_text(
        "destination: D:\\DomainBackups\nbackup_admx: true\nretry_count: 3\n",
        encoding="utf-8",
    )

    loader = ConfigLoader()
    loaded = loader.load(str(config_file))

    assert loaded["destination"] == "D:\\DomainBackups"
    assert loaded["backup_admx"] is True
    assert loaded["retry_count"] == 3


def test_config_loader_rejects_unknown_keys(tmp_path):
    config_file = tmp_path / ".policybackup.yml"
    config_file.write_text("unknown_key: true\n", encoding="utf-8")

    loader = ConfigLoader()

    with pytest.raises(InvalidConfigError, match="Unknown configuration keys"):
        loader.load(str(config_file))


def test_config_loader_rejects_non_mapping(tmp_path):
    config_file = tmp_path / ".policybackup.yml"
    config_file.write_text("- destination\n", encoding="utf-8")

    with pytest.raises(InvalidConfigError, match="YAML mapping"):
        ConfigLoader().load(str(config_file))


def test_config_loader_missing_file(tmp_path):
    with pytest.raises(InvalidConfigError, match="Config file not found"):
        ConfigLoader().load(str(tmp_path / "missing.yml"))


def test_config_loader_empty_file_returns_empty_mapping(tmp_path):
    config_file = tmp_path / ".policybackup.yml"
    config_file.write_text("", encoding="utf-8")

    assert ConfigLoader().load(str(config_file)) == {}
