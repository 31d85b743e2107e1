"""Actionable error catalog for PolicyBackup."""

from typing import Dict

_ERROR_MESSAGES: Dict[str, Dict[str, str]] = {
    "destination_missing": {
        "what": "Destination path not found: {path}",
        "next": "Create the folder or point `--destination` at an existing directory.",
    },
    "destination_not_directory": {
        "what": "Destination path is not a directory: {path}",
        "next": "Point `--destination` at a directory, not a file.",
    },
    "domain_lookup_failed": {
        "what": "Could not resolve the current domain name: {reason}",
        "next": "Run on a domain member with the ActiveDirectory PowerShell module, or pass `--domain`.",
    },
    "admx_source_unreachable": {
        "what": "ADMX source folder is not reachable: {path}",
        "next": "Check that the folder exists and that the account can read it.",
    },
    "copy_failed": {
        "what": "Mirroring copy from {source} to {destination} failed: {reason}",
        "next": "Review the robocopy output above and re-run; the copy resumes where it stopped.",
    },
    "gpo_export_failed": {
        "what": "GPO export to {path} failed: {reason}",
        "next": "Install the Group Policy Management tools (GroupPolicy module) and check domain permissions.",
    },
    "log_init_failed": {
        "what": "Could not create log file {path}: {reason}",
        "next": "Check permissions on the logs folder or pass `--logs-dir`.",
    },
}


def actionable_error(code: str, **kwargs: str) -> str:
    if code not in _ERROR_MESSAGES:
        raise KeyError(f"Unknown error catalog key: {code}")

    template = _ERROR_MESSAGES[code]
    what = template["what"].format(**kwargs)
    next_step = template["next"].format(**kwargs)
    return f"{what} Suggested action: {next_step}"
