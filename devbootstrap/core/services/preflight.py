"""
Preflight — host checks before anything is touched.

Read-only: resolves the package manager, refuses to run as root and
probes passwordless sudo. The sudo probe never fails the run.
"""

from __future__ import annotations

import logging
import os
import shutil

from devbootstrap.adapters.shell.command import run_command
from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console

logger = logging.getLogger(__name__)


def sudo_is_passwordless() -> bool:
    """True when ``sudo -n true`` succeeds (cached credentials or NOPASSWD)."""
    if shutil.which("sudo") is None:
        return False
    return run_command(["sudo", "-n", "true"], timeout=10)["ok"]


def check_preflight(settings: BootstrapSettings, console: Console) -> StageResult:
    """Verify the host can be bootstrapped."""
    manager = settings.package_manager
    manager_path = shutil.which(manager)
    if manager_path is None:
        return StageResult.failure(
            "preflight",
            f"This script requires {manager} package manager (Ubuntu/Debian)",
            metadata={"package_manager": manager},
        )
    logger.debug("Package manager %s at %s", manager, manager_path)

    if os.geteuid() == 0:
        return StageResult.failure(
            "preflight",
            "Please run this script as a regular user with sudo privileges, not as root",
        )

    passwordless = sudo_is_passwordless()
    if not passwordless:
        console.info("This script requires sudo privileges. You may be prompted for your password.")

    return StageResult.success(
        "preflight",
        metadata={"package_manager": manager_path, "passwordless_sudo": passwordless},
    )
