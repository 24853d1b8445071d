"""
Shell profile and environment mutations.

Applies the ConfigMutation values produced by provisioning: PATH changes
go into the environment mapping handed to child processes (never into
``os.environ``), profile lines are appended to the profile file once.
"""

from __future__ import annotations

import logging
import os
from collections.abc import MutableMapping, Sequence
from pathlib import Path

from devbootstrap.core.models.mutation import ConfigMutation, PathPrepend, ProfileLine

logger = logging.getLogger(__name__)

_MARKER = "# added by devbootstrap"


def path_export_line(directory: str) -> str:
    """POSIX ``export PATH`` line, ``~`` spelled as ``$HOME``."""
    if directory.startswith("~/"):
        directory = "$HOME/" + directory[2:]
    return f'export PATH="{directory}:$PATH"'


def prepend_path(env: MutableMapping[str, str], directory: str) -> bool:
    """Move or add ``directory`` to the front of ``env["PATH"]``.

    Returns True when PATH changed.
    """
    current = [p for p in env.get("PATH", "").split(os.pathsep) if p]
    if current and current[0] == directory:
        return False
    env["PATH"] = os.pathsep.join([directory, *[p for p in current if p != directory]])
    return True


def ensure_profile_line(profile: Path, line: str) -> bool:
    """Append ``line`` to ``profile`` unless it is already there.

    Returns True when the file was modified.
    """
    existing = profile.read_text(encoding="utf-8") if profile.is_file() else ""
    if any(candidate.strip() == line for candidate in existing.splitlines()):
        return False

    prefix = "" if not existing or existing.endswith("\n") else "\n"
    profile.parent.mkdir(parents=True, exist_ok=True)
    with profile.open("a", encoding="utf-8") as fh:
        fh.write(f"{prefix}{_MARKER}\n{line}\n")
    return True


def apply_mutations(
    mutations: Sequence[ConfigMutation],
    env: MutableMapping[str, str],
) -> list[str]:
    """Apply mutations and return a description of each change made."""
    applied: list[str] = []
    for mutation in mutations:
        if isinstance(mutation, PathPrepend):
            changed = prepend_path(env, mutation.directory)
        elif isinstance(mutation, ProfileLine):
            changed = ensure_profile_line(Path(mutation.profile), mutation.line)
        else:
            raise TypeError(f"Unknown mutation: {mutation!r}")

        if changed:
            applied.append(mutation.describe())
            logger.info("Applied %s", mutation.describe())
        else:
            logger.debug("Already applied: %s", mutation.describe())
    return applied
