"""
Delegated execution — hand over to the playbook shipped in the clone.

The entry point runs with its own directory as cwd, the bootstrap
environment (PATH already includes the user-local bin dir) and
``ANSIBLE_VAULT_PASSWORD_FILE`` pointing at the passphrase file.
Its exit status is reported, never propagated.
"""

from __future__ import annotations

import logging
import os
import shlex
from collections.abc import Mapping
from pathlib import Path

from devbootstrap.adapters.shell.command import run_command
from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console

logger = logging.getLogger(__name__)

VAULT_ENV_VAR = "ANSIBLE_VAULT_PASSWORD_FILE"

_PLAYBOOK_SUFFIXES = (".yml", ".yaml")


def entry_point_command(entry: Path, vault_file: Path) -> list[str]:
    """Command line for an entry point, relative to its own directory."""
    if entry.suffix in _PLAYBOOK_SUFFIXES:
        return ["ansible-playbook", entry.name, "--vault-password-file", str(vault_file)]
    if os.access(entry, os.X_OK):
        return [f"./{entry.name}"]
    return ["bash", entry.name]


def run_entry_point(
    settings: BootstrapSettings,
    env: Mapping[str, str],
    vault_file: Path,
    console: Console,
) -> StageResult:
    """Run the automation entry point if the clone has one."""
    entry = settings.entry_point_path

    if not entry.is_file():
        hints: list[str] = []
        legacy = settings.legacy_entry_point_path
        if legacy.is_file():
            hints.append(
                f"Legacy setup is available: cd {settings.clone_path} && "
                f"./{settings.legacy_entry_point}"
            )
        return StageResult.warning(
            "delegation",
            f"No automation entry point found at {entry}",
            hints=hints,
            metadata={"entry_point": str(entry), "legacy_available": bool(hints)},
        )

    cmd = entry_point_command(entry, vault_file)
    child_env = dict(env)
    child_env[VAULT_ENV_VAR] = str(vault_file)

    console.info(f"Running automation entry point {settings.entry_point}...")
    result = run_command(cmd, interactive=True, env=child_env, cwd=entry.parent)

    if not result["ok"]:
        retry = f"cd {entry.parent} && {VAULT_ENV_VAR}=<passphrase file> {shlex.join(cmd)}"
        return StageResult.warning(
            "delegation",
            f"Automation run failed (exit {result.get('returncode')}), but setup is complete",
            hints=[f"Re-run manually: {retry}"],
            metadata={"returncode": result.get("returncode"), "command": result.get("command")},
        )

    console.info("Automation run completed successfully!")
    return StageResult.success(
        "delegation",
        "automation entry point succeeded",
        metadata={"returncode": 0, "command": result.get("command")},
    )
