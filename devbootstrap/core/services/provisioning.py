"""
Toolchain provisioning — user-local ansible plus galaxy collections.

Install decision by detected state:

    user_local  → already in ~/.local/bin, skip
    system      → distro package on the system PATH; remove it
                  (best-effort), then install user-local
    absent      → install user-local

User-local installs go through ``pipx``, which is itself installed with
the package manager when missing. PATH and shell-profile changes are
returned as mutations on the StageResult, never applied here.
"""

from __future__ import annotations

import logging
import os
import shutil
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from devbootstrap.adapters.shell.command import run_command
from devbootstrap.core.models.mutation import ConfigMutation, PathPrepend, ProfileLine
from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console
from devbootstrap.core.services.shell_profile import path_export_line

logger = logging.getLogger(__name__)

InstallState = Literal["absent", "user_local", "system"]


@dataclass
class ToolInstall:
    """Where (and whether) the automation tool is installed."""

    state: InstallState
    path: Path | None = None


def _is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def detect_tool(settings: BootstrapSettings, env: Mapping[str, str]) -> ToolInstall:
    """Classify the current installation of ``settings.tool_binary``."""
    user_local = settings.user_bin_path / settings.tool_binary
    if _is_executable(user_local):
        return ToolInstall("user_local", user_local)

    found = shutil.which(settings.tool_binary, path=env.get("PATH"))
    if found:
        return ToolInstall("system", Path(found))
    return ToolInstall("absent")


def path_mutations(settings: BootstrapSettings) -> list[ConfigMutation]:
    """PATH changes that make the user-local bin dir win over system paths."""
    return [
        PathPrepend(directory=str(settings.user_bin_path)),
        ProfileLine(
            profile=str(settings.profile_path),
            line=path_export_line(settings.user_bin_dir),
        ),
    ]


def _find_pipx(settings: BootstrapSettings, env: Mapping[str, str]) -> str | None:
    found = shutil.which("pipx", path=env.get("PATH"))
    if found:
        return found
    user_local = settings.user_bin_path / "pipx"
    return str(user_local) if _is_executable(user_local) else None


def ensure_pipx(
    settings: BootstrapSettings,
    env: Mapping[str, str],
    console: Console,
) -> str | StageResult:
    """Return the pipx executable, installing it via the package manager.

    Returns a failed StageResult when pipx cannot be obtained.
    """
    pipx = _find_pipx(settings, env)
    if pipx:
        return pipx

    manager = settings.package_manager
    console.info("Updating package manager...")
    updated = run_command([manager, "update"], needs_sudo=True, interactive=True, env=env)
    if not updated["ok"]:
        return StageResult.failure(
            "provisioning",
            f"Package list update failed: {updated['error']}",
        )

    console.info("Installing pipx...")
    installed = run_command(
        [manager, "install", "-y", "pipx"], needs_sudo=True, interactive=True, env=env,
    )
    if not installed["ok"]:
        return StageResult.failure("provisioning", f"Failed to install pipx: {installed['error']}")

    pipx = _find_pipx(settings, env)
    if pipx is None:
        return StageResult.failure("provisioning", "pipx was installed but is not on PATH")
    return pipx


def provision_toolchain(
    settings: BootstrapSettings,
    env: Mapping[str, str],
    console: Console,
) -> StageResult:
    """Make sure a user-local install of the automation tool exists."""
    tool = settings.tool_package
    mutations = path_mutations(settings)
    current = detect_tool(settings, env)
    logger.debug("Detected %s install: %s (%s)", tool, current.state, current.path)

    if current.state == "user_local":
        console.info(f"{tool} is already installed at {current.path}")
        return StageResult.success(
            "provisioning",
            f"{tool} already installed",
            mutations=mutations,
            metadata={"action": "skipped", "path": str(current.path)},
        )

    if current.state == "system":
        console.warn(f"Found system {tool} at {current.path}; replacing it with a user-local install")
        removed = run_command(
            [settings.package_manager, "remove", "-y", *settings.system_packages],
            needs_sudo=True,
            interactive=True,
            env=env,
        )
        if not removed["ok"]:
            console.warn(
                f"Could not remove system {tool} ({removed['error']}); "
                f"{settings.user_bin_dir} will take precedence on PATH"
            )

    pipx = ensure_pipx(settings, env, console)
    if isinstance(pipx, StageResult):
        return pipx

    console.info(f"Installing {tool}...")
    installed = run_command(
        [pipx, "install", "--force", "--include-deps", tool],
        interactive=True,
        env=env,
    )
    if not installed["ok"]:
        return StageResult.failure("provisioning", f"Failed to install {tool}: {installed['error']}")

    binary = settings.user_bin_path / settings.tool_binary
    if not _is_executable(binary):
        return StageResult.failure(
            "provisioning",
            f"{tool} was installed but {binary} is missing",
            hints=[f"Check 'pipx list' and that pipx links into {settings.user_bin_dir}"],
        )

    console.info(f"{tool} installed successfully")
    return StageResult.success(
        "provisioning",
        f"{tool} installed",
        mutations=mutations,
        metadata={
            "action": "replaced" if current.state == "system" else "installed",
            "path": str(binary),
            "previous": str(current.path) if current.path else None,
        },
    )


def install_extensions(
    settings: BootstrapSettings,
    env: Mapping[str, str],
    console: Console,
) -> StageResult:
    """Install each configured galaxy collection; failures only warn."""
    if not settings.extensions:
        return StageResult.success("provisioning", "no extensions configured")

    galaxy_path = settings.user_bin_path / "ansible-galaxy"
    galaxy = str(galaxy_path) if _is_executable(galaxy_path) else "ansible-galaxy"

    installed: list[str] = []
    failed: list[str] = []
    for name in settings.extensions:
        console.info(f"Installing ansible collection {name}...")
        result = run_command(
            [galaxy, "collection", "install", "--upgrade", name],
            env=env,
            timeout=600,
        )
        if result["ok"]:
            installed.append(name)
        else:
            failed.append(name)
            detail = result.get("stderr", "").strip().splitlines()
            reason = detail[-1] if detail else result["error"]
            console.warn(f"Failed to install collection {name}: {reason}")

    metadata = {"installed": installed, "failed": failed}
    if failed:
        return StageResult.warning(
            "provisioning",
            f"{len(failed)} of {len(settings.extensions)} collections failed to install",
            hints=[f"Retry later: ansible-galaxy collection install {' '.join(failed)}"],
            metadata=metadata,
        )
    return StageResult.success("provisioning", "collections installed", metadata=metadata)
