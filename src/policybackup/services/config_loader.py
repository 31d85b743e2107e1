"""Configuration loader for PolicyBackup."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from policybackup.errors import InvalidConfigError


class ConfigLoader:
    """Loads YAML configuration files for CLI defaults."""

    SUPPORTED_KEYS = {
        "destination",
        "backup_admx",
        "backup_gpo",
        "verbose",
        "dry_run",
        "logs_dir",
        "domain",
        "sysvol_root",
        "local_policy_definitions",
        "retry_count",
        "retry_wait_seconds",
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InvalidConfigError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InvalidConfigError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InvalidConfigError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InvalidConfigError(f"Unknown configuration keys: {unknown_list}")

        return parsed
