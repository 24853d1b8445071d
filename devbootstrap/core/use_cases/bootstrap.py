"""
Bootstrap use case — the linear controller.

    preflight → credentials → provisioning → materialization → delegation

Each stage returns a StageResult. ``failed`` stops the run (exit 1),
``warning`` is reported and the run continues. Everything after
credential collection runs inside the secret guards, so the vault
passphrase file is removed and the token cleared however the run ends,
including KeyboardInterrupt and SystemExit raised from a signal handler.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field

from devbootstrap.core.models.result import StageResult
from devbootstrap.core.models.settings import BootstrapSettings
from devbootstrap.core.observability.console import Console
from devbootstrap.core.security.secrets import AccessToken, VaultPassFile
from devbootstrap.core.services.credentials import collect_credentials
from devbootstrap.core.services.delegate import run_entry_point
from devbootstrap.core.services.preflight import check_preflight
from devbootstrap.core.services.provisioning import install_extensions, provision_toolchain
from devbootstrap.core.services.repository import (
    backup_existing_clone,
    clone_repository,
    ensure_parent_dir,
)
from devbootstrap.core.services.shell_profile import apply_mutations

logger = logging.getLogger(__name__)


@dataclass
class BootstrapResult:
    """Outcome of a full bootstrap run."""

    stages: list[StageResult] = field(default_factory=list)
    applied_mutations: list[str] = field(default_factory=list)
    completed: bool = False

    @property
    def failed_stage(self) -> StageResult | None:
        return next((s for s in self.stages if s.failed), None)

    @property
    def warnings(self) -> list[StageResult]:
        return [s for s in self.stages if s.warned]

    @property
    def exit_code(self) -> int:
        return 1 if self.failed_stage else 0

    def to_dict(self) -> dict:
        failed = self.failed_stage
        return {
            "completed": self.completed,
            "exit_code": self.exit_code,
            "failed_stage": failed.stage if failed else None,
            "applied_mutations": self.applied_mutations,
            "stages": [s.model_dump(exclude={"mutations"}) for s in self.stages],
        }


class _Recorder:
    """Collects stage results and prints their summary lines."""

    def __init__(self, result: BootstrapResult, console: Console) -> None:
        self.result = result
        self.console = console

    def __call__(self, stage: StageResult) -> bool:
        """Record ``stage``; return True when the run may continue."""
        self.result.stages.append(stage)
        logger.info("Stage %s: %s %s", stage.stage, stage.status, stage.message)

        if stage.failed:
            self.console.error(stage.message)
            for hint in stage.hints:
                self.console.error(hint)
            return False

        if stage.warned:
            self.console.warn(stage.message)
            for hint in stage.hints:
                self.console.info(hint)
        return True


def run_bootstrap(
    settings: BootstrapSettings,
    *,
    ask_secret: Callable[[str], str],
    confirm: Callable[[str], bool],
    console: Console,
    env: Mapping[str, str] | None = None,
) -> BootstrapResult:
    """Run every stage in order.

    Args:
        settings: Resolved bootstrap settings.
        ask_secret: Prompt returning a hidden-input answer.
        confirm: Yes/no prompt, defaulting to no.
        console: Reporter for user-facing lines.
        env: Base environment for child processes (default: os.environ).
            PATH changes from provisioning are applied to a copy of it.

    Returns:
        BootstrapResult; ``exit_code`` is 1 when a fatal stage failed.
    """
    result = BootstrapResult()
    record = _Recorder(result, console)
    child_env = dict(os.environ if env is None else env)

    if not record(check_preflight(settings, console)):
        return result

    stage, credentials = collect_credentials(settings, ask_secret, console)
    if not record(stage):
        return result
    if credentials is None:
        raise RuntimeError("credentials stage reported success without credentials")

    with credentials.vault_file as vault_file, credentials.token as token:
        console.info(f"Vault passphrase stored at {vault_file.path} (removed on exit)")
        _run_guarded(settings, child_env, vault_file, token, confirm, console, record)

    if result.failed_stage is None:
        result.completed = True
        console.info("Development environment setup completed!")
        console.info(f"{settings.repo_name} is available at: {settings.clone_path}")
    return result


def _run_guarded(
    settings: BootstrapSettings,
    env: dict[str, str],
    vault_file: VaultPassFile,
    token: AccessToken,
    confirm: Callable[[str], bool],
    console: Console,
    record: _Recorder,
) -> None:
    """Stages that need the secrets in place."""
    provisioned = provision_toolchain(settings, env, console)
    if not record(provisioned):
        return

    applied = apply_mutations(provisioned.mutations, env)
    record.result.applied_mutations.extend(applied)
    for change in applied:
        console.info(f"Updated {change}")

    record(install_extensions(settings, env, console))

    if not record(ensure_parent_dir(settings, console)):
        return
    if not record(backup_existing_clone(settings, confirm, console)):
        return
    if not record(clone_repository(settings, token, console, env=env)):
        return

    record(run_entry_point(settings, env, vault_file.path, console))
