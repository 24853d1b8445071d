"""
Git adapter — clone and remote rewrite for the dotfiles repository.

Uses the git CLI through :func:`run_command`. Terminal prompts are
disabled so a rejected token fails fast instead of asking for a
username on the TTY.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from devbootstrap.adapters.shell.command import run_command

logger = logging.getLogger(__name__)


def _git_env(env: Mapping[str, str] | None) -> dict[str, str]:
    merged = dict(env if env is not None else os.environ)
    merged["GIT_TERMINAL_PROMPT"] = "0"
    return merged


def git_clone(
    url: str,
    dest: Path,
    *,
    env: Mapping[str, str] | None = None,
    timeout: int | None = None,
    redact: Iterable[str] = (),
) -> dict[str, Any]:
    """Clone ``url`` into ``dest`` (which must not exist)."""
    return run_command(
        ["git", "clone", url, str(dest)],
        cwd=dest.parent,
        env=_git_env(env),
        timeout=timeout,
        redact=redact,
    )


def git_set_remote_url(
    repo_dir: Path,
    url: str,
    *,
    remote: str = "origin",
    env: Mapping[str, str] | None = None,
) -> dict[str, Any]:
    """Point ``remote`` of the repository at ``url``."""
    return run_command(
        ["git", "-C", str(repo_dir), "remote", "set-url", remote, url],
        env=_git_env(env),
        timeout=30,
    )
