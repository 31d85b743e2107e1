import logging
import os

import click
from rich.logging import RichHandler

from .core import PolicyBackup
from .errors import PolicyBackupError
from .services.config_loader import ConfigLoader

DEFAULT_CONFIG_NAME = ".policybackup.yml"


def _resolve_option(cli_value, config, key, default=None):
    if cli_value is not None:
        return cli_value
    if key in config:
        return config[key]
    return default


logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_level=False, show_path=False)],
)


@click.command()
@click.option(
    "--destination",
    "-d",
    required=False,
    help="Existing folder that receives the timestamped backup folders.",
)
@click.option("--backup-admx", is_flag=True, default=None, help="Back up SYSVOL and local ADMX files.")
@click.option("--backup-gpo", is_flag=True, default=None, help="Export all Group Policy Objects.")
@click.option(
    "--config",
    required=False,
    type=click.Path(),
    help=f"Path to a YAML configuration file. Defaults to {DEFAULT_CONFIG_NAME} if present.",
)
@click.option("--verbose", is_flag=True, default=None, help="Echo DEBUG and FATAL log lines to the console.")
@click.option(
    "--dry-run",
    is_flag=True,
    default=None,
    help="Show what would be created, copied and exported without changing anything.",
)
@click.option(
    "--logs-dir",
    required=False,
    type=click.Path(file_okay=False),
    help="Root folder for run logs (default: ./Logs).",
)
@click.option(
    "--domain",
    required=False,
    help="Domain DNS name. Skips the Active Directory lookup when given.",
)
@click.option(
    "--sysvol-root",
    required=False,
    type=click.Path(file_okay=False),
    help="SYSVOL root folder (default: %SystemRoot%\\SYSVOL).",
)
@click.option(
    "--local-policy-definitions",
    required=False,
    type=click.Path(file_okay=False),
    help="Local PolicyDefinitions folder (default: %SystemRoot%\\PolicyDefinitions).",
)
@click.option(
    "--retry-count",
    required=False,
    type=int,
    default=None,
    help="robocopy retries on failed copies (minimum 2, default 2).",
)
@click.option(
    "--retry-wait-seconds",
    required=False,
    type=int,
    default=None,
    help="Seconds robocopy waits between retries (default 5).",
)
def main(
    destination,
    backup_admx,
    backup_gpo,
    config,
    verbose,
    dry_run,
    logs_dir,
    domain,
    sysvol_root,
    local_policy_definitions,
    retry_count,
    retry_wait_seconds,
):
    """Back up ADMX policy definitions and Group Policy Objects to a timestamped folder."""

    try:
        config_loader = ConfigLoader()
        resolved_config = config
        if resolved_config is None:
            default_config_path = os.path.join(os.getcwd(), DEFAULT_CONFIG_NAME)
            if os.path.exists(default_config_path):
                resolved_config = default_config_path

        config_values = config_loader.load(resolved_config)
    except PolicyBackupError as exc:
        raise click.ClickException(str(exc)) from exc

    destination = _resolve_option(destination, config_values, "destination")
    backup_admx = bool(_resolve_option(backup_admx, config_values, "backup_admx", default=False))
    backup_gpo = bool(_resolve_option(backup_gpo, config_values, "backup_gpo", default=False))
    verbose = bool(_resolve_option(verbose, config_values, "verbose", default=False))
    dry_run = bool(_resolve_option(dry_run, config_values, "dry_run", default=False))
    logs_dir = _resolve_option(logs_dir, config_values, "logs_dir")
    domain = _resolve_option(domain, config_values, "domain")
    sysvol_root = _resolve_option(sysvol_root, config_values, "sysvol_root")
    local_policy_definitions = _resolve_option(
        local_policy_definitions,
        config_values,
        "local_policy_definitions",
    )
    retry_count = int(_resolve_option(retry_count, config_values, "retry_count", default=2))
    retry_wait_seconds = int(
        _resolve_option(retry_wait_seconds, config_values, "retry_wait_seconds", default=5)
    )

    if not destination:
        raise click.ClickException("Missing required option '--destination' (or provide it in config).")

    try:
        backup = PolicyBackup(
            destination=destination,
            backup_admx=backup_admx,
            backup_gpo=backup_gpo,
            verbose=verbose,
            dry_run=dry_run,
            logs_dir=logs_dir,
            domain=domain,
            sysvol_root=sysvol_root,
            local_policy_definitions=local_policy_definitions,
            retry_count=retry_count,
            retry_wait_seconds=retry_wait_seconds,
        )
    except PolicyBackupError as exc:
        raise click.ClickException(str(exc)) from exc

    raise SystemExit(backup.run())


if __name__ == "__main__":
    main()
