"""
Repository materialization — parent dir, backup of a stale clone, clone.

An existing clone directory is never overwritten: the user either agrees
to a timestamped rename (``<name>.bak.YYYYmmdd_HHMMSS``) or the run stops
with the directory untouched.

The access token is embedded in the clone URL for exactly one ``git
clone`` call and cleared as soon as that call returns. ``origin`` is then
rewritten to the token-free URL so ``.git/config`` does not keep it.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping
from pathlib import Path

from devbootstrap.adapters.vcs.git import git_clone, git_set_remote_url
from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console
from devbootstrap.core.security.secrets import AccessToken

logger = logging.getLogger(__name__)

Confirm = Callable[[str], bool]


def ensure_parent_dir(settings: BootstrapSettings, console: Console) -> StageResult:
    parent = settings.parent_path
    if parent.is_dir():
        return StageResult.success("materialization", f"{parent} exists")

    console.info(f"Creating {parent} directory...")
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        return StageResult.failure("materialization", f"Cannot create {parent}: {e}")
    return StageResult.success("materialization", f"created {parent}")


def backup_name(target: Path, timestamp: str | None = None) -> Path:
    """Free ``<target>.bak.<timestamp>`` path next to ``target``."""
    ts = timestamp or time.strftime("%Y%m%d_%H%M%S")
    candidate = target.with_name(f"{target.name}.bak.{ts}")
    counter = 1
    while candidate.exists():
        candidate = target.with_name(f"{target.name}.bak.{ts}-{counter}")
        counter += 1
    return candidate


def backup_existing_clone(
    settings: BootstrapSettings,
    confirm: Confirm,
    console: Console,
    timestamp: str | None = None,
) -> StageResult:
    """Move a pre-existing clone directory aside, if the user agrees."""
    target = settings.clone_path
    if not target.exists() and not target.is_symlink():
        return StageResult.success("materialization", "no existing clone")

    console.warn(f"{settings.repo_name} directory already exists at {target}")
    if not confirm("Do you want to rename it to a backup?"):
        return StageResult.failure(
            "materialization",
            f"Cannot proceed with existing {settings.repo_name} directory. Exiting.",
            metadata={"existing": str(target)},
        )

    dest = backup_name(target, timestamp)
    try:
        target.rename(dest)
    except OSError as e:
        return StageResult.failure(
            "materialization",
            f"Could not move {target} to {dest}: {e}",
            metadata={"existing": str(target)},
        )
    console.info(f"Moved existing directory to {dest}")
    return StageResult.success(
        "materialization",
        f"backed up to {dest.name}",
        metadata={"backup": str(dest)},
    )


def clone_repository(
    settings: BootstrapSettings,
    token: AccessToken,
    console: Console,
    env: Mapping[str, str] | None = None,
) -> StageResult:
    """Clone the repository with the token, then clear the token."""
    target = settings.clone_path
    console.info(f"Cloning {settings.repo_name} repository...")

    secret = token.reveal()
    try:
        result = git_clone(
            settings.authenticated_url(secret),
            target,
            env=env,
            timeout=settings.clone_timeout,
            redact=[secret],
        )
    finally:
        token.clear()
        secret = ""

    if not result["ok"]:
        stderr = result.get("stderr", "").strip()
        if stderr:
            logger.info("git clone stderr: %s", stderr)
        return StageResult.failure(
            "materialization",
            f"Failed to clone {settings.repo_name} repository.",
            hints=[
                f"Ensure your PAT has 'Contents: Read/Write' permission for the "
                f"{settings.repo_name} repository.",
                f"For fine-grained tokens, verify '{settings.repo_slug}' repository "
                f"access is granted.",
            ],
            metadata={"returncode": result.get("returncode"), "stderr": stderr},
        )

    rewritten = git_set_remote_url(target, settings.public_url, env=env)
    if not rewritten["ok"]:
        console.warn(
            f"Could not reset origin to {settings.public_url}; "
            f"check {target / '.git' / 'config'} for a stored token"
        )

    console.info(f"{settings.repo_name} cloned successfully to {target}")
    return StageResult.success(
        "materialization",
        f"cloned to {target}",
        metadata={"path": str(target), "origin": settings.public_url},
    )
